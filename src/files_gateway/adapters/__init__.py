"""
Adapter layer for the Files Gateway.

Contains the storage adapter that presents get/put over an S3-compatible endpoint.
"""

"""HTTP gateway that streams uploads into, and downloads out of, an S3-compatible bucket."""

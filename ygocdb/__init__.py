"""Local-first client for the ygocdb.com card dataset and card images."""

"""ABBYY Cloud OCR SDK actions."""

"""License Field OCR.

Template-driven extraction of structured fields from driver's license
images: crop labeled regions, recognize them with Tesseract, and normalize
the text per field (sex codes, street addresses).
"""

__version__ = "1.0.0"

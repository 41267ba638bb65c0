import os

from dotenv import load_dotenv

load_dotenv()

CANLII_API_KEY = os.environ.get("CANLII_API_KEY", "")
CANLII_LANGUAGE = os.environ.get("CANLII_LANGUAGE", "en")
CANLII_API_URL = os.environ.get("CANLII_API_URL", "https://api.canlii.org/v1/")

import io
import re
import time
from typing import List

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from packages.aia_core.dto import ResumeUploadDTO, ContactInfoDTO
from packages.aia_core.logging import get_logger
from .base import IResumeParser

MAX_PAGES = 50

EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
PHONE_PATTERN = re.compile(r"(?:\+?\d{1,3}[\s.-]?)?(?:\(\d{2,4}\)|\d{2,4})[\s.-]?\d{3,4}[\s.-]?\d{4}")
NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z.'-]*(?:\s+[A-Za-z][A-Za-z.'-]*){1,3}$")

class LocalPDFResumeParser(IResumeParser):
    """
    Local resume parser using pypdf.
    Reads the text layer and picks out email, phone and name with simple heuristics.
    Non-PDF uploads return empty fields so intake falls back to MISSING_INFO.
    """

    def __init__(self):
        self.logger = get_logger("aia.provider.resume.pdf")

    async def parse(self, upload: ResumeUploadDTO) -> ContactInfoDTO:
        if upload.extension != "pdf":
            self.logger.warning(f"No text extraction for '{upload.file_name}'; returning empty contact info")
            return ContactInfoDTO()

        start_time = time.time()
        try:
            reader = PdfReader(io.BytesIO(upload.content))
        except PdfReadError as e:
            self.logger.exception(f"Unreadable PDF: {upload.file_name}")
            raise ValueError(f"Unreadable PDF: {e}") from e

        if reader.is_encrypted:
            raise ValueError("Encrypted PDF files are not supported.")

        num_pages = len(reader.pages)
        if num_pages > MAX_PAGES:
            raise ValueError(f"PDF exceeds maximum page limit ({MAX_PAGES}). Current: {num_pages}")

        full_text = "\n".join((page.extract_text() or "").strip() for page in reader.pages)
        contact = self.extract_contact(full_text)

        latency_ms = int((time.time() - start_time) * 1000)
        self.logger.info(
            f"Resume parsed. Pages: {num_pages}, Missing: {contact.missing_fields()}, Time: {latency_ms}ms"
        )
        return contact

    @staticmethod
    def extract_contact(text: str) -> ContactInfoDTO:
        email_match = EMAIL_PATTERN.search(text)
        phone_match = PHONE_PATTERN.search(text)

        name = ""
        lines: List[str] = [line.strip() for line in text.splitlines() if line.strip()]
        for line in lines[:5]:
            if EMAIL_PATTERN.search(line) or PHONE_PATTERN.search(line):
                continue
            if NAME_PATTERN.match(line):
                name = line
                break

        return ContactInfoDTO(
            name=name,
            email=email_match.group(0) if email_match else "",
            phone=phone_match.group(0).strip() if phone_match else ""
        )

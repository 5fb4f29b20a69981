import asyncio
from packages.aia_core.config import AIAConfig
from packages.aia_core.dto import ResumeUploadDTO, ContactInfoDTO
from .base import IResumeParser

class MockResumeParser(IResumeParser):
    """
    Demo parser driven by the file name:
    'missing' drops the phone, 'no-contact' drops email and phone.
    """
    def __init__(self, config: AIAConfig = None):
        self.config = config
        self.latency_ms = 0
        if config and hasattr(config, 'MOCK_LATENCY_MS'):
            self.latency_ms = config.MOCK_LATENCY_MS

    async def parse(self, upload: ResumeUploadDTO) -> ContactInfoDTO:
        if self.latency_ms > 0:
            await asyncio.sleep(self.latency_ms / 1000.0)

        file_name = upload.file_name.lower()
        if "missing" in file_name:
            return ContactInfoDTO(name="Jamie Doe", email="jamie@example.com", phone="")
        if "no-contact" in file_name:
            return ContactInfoDTO(name="Chris Lee", email="", phone="")
        return ContactInfoDTO(name="Alex Johnson", email="alex@example.com", phone="555-0101")

from abc import ABC, abstractmethod
from packages.aia_core.dto import ResumeUploadDTO, ContactInfoDTO

class IResumeParser(ABC):
    """
    Abstract Base Class for resume contact extraction.
    """

    @abstractmethod
    async def parse(self, upload: ResumeUploadDTO) -> ContactInfoDTO:
        """
        Extract contact details from a resume.

        Args:
            upload (ResumeUploadDTO): File name and raw bytes.

        Returns:
            ContactInfoDTO: Any field may be an empty string.

        Raises:
            Exception: If the file cannot be processed at all.
        """
        pass

from bizknowledge.providers.extraction.basic_file_extractor import (
    FILE_TYPE_DESCRIPTION,
    SUPPORTED_EXTENSIONS,
    BasicFileExtractor,
)

__all__ = ["FILE_TYPE_DESCRIPTION", "SUPPORTED_EXTENSIONS", "BasicFileExtractor"]

from .file_detector import detect_file_type
from .pdf_extractor import extract_text_from_pdf, extract_text_with_pymupdf
from .docx_extractor import extract_text_from_docx, extract_text_with_python_docx
from .text_extractor import (
    DocumentTextExtractor,
    PdfHeuristicExtractor,
    PdfLibraryExtractor,
    DocxHeuristicExtractor,
    DocxLibraryExtractor,
    build_extractor_chain,
    extract_text_from_document,
    validate_extracted_text
)
from .text_normalizer import preprocess_resume_text
from .structured_extractor import (
    StructuredExtractor,
    build_structured_extractor,
    parse_llm_json,
    RESUME_PARSER_PROMPT,
    RESUME_RESPONSE_SCHEMA
)
from .candidate_transformer import (
    transform_to_candidate_info,
    map_experience_to_bucket,
    derive_education_string,
    deduplicate_skills,
    extract_basic_contact_info
)
from .error_handler import (
    ResumeProcessingError,
    ConfigurationError,
    DocumentDownloadError,
    TextExtractionError,
    InsufficientContentError,
    ExternalServiceError,
    get_user_friendly_error_message,
    create_error_candidate_info
)
from .document_fetcher import download_document
from .resume_parser import ResumeParsingPipeline, ParseOutcome

__all__ = [
    # Detection / extraction
    "detect_file_type",
    "extract_text_from_pdf",
    "extract_text_with_pymupdf",
    "extract_text_from_docx",
    "extract_text_with_python_docx",
    "DocumentTextExtractor",
    "PdfHeuristicExtractor",
    "PdfLibraryExtractor",
    "DocxHeuristicExtractor",
    "DocxLibraryExtractor",
    "build_extractor_chain",
    "extract_text_from_document",
    "validate_extracted_text",
    # Normalization
    "preprocess_resume_text",
    # LLM extraction
    "StructuredExtractor",
    "build_structured_extractor",
    "parse_llm_json",
    "RESUME_PARSER_PROMPT",
    "RESUME_RESPONSE_SCHEMA",
    # Transformation
    "transform_to_candidate_info",
    "map_experience_to_bucket",
    "derive_education_string",
    "deduplicate_skills",
    "extract_basic_contact_info",
    # Errors
    "ResumeProcessingError",
    "ConfigurationError",
    "DocumentDownloadError",
    "TextExtractionError",
    "InsufficientContentError",
    "ExternalServiceError",
    "get_user_friendly_error_message",
    "create_error_candidate_info",
    # Pipeline
    "download_document",
    "ResumeParsingPipeline",
    "ParseOutcome"
]

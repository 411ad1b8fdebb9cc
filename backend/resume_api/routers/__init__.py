from .parse_resume import router as parse_resume_router

__all__ = [
    "parse_resume_router"
]

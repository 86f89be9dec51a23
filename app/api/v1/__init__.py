from app.api.v1.marks import router as marks_router

__all__ = [
    "marks_router",
]

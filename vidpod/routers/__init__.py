from .progress import router as progress_router
from .quiz import router as quiz_router

routes = [
    quiz_router,
    progress_router,
]

from fastapi import APIRouter, Response, status

router = APIRouter()


@router.get("/health_check")
def health_check() -> Response:
    """Liveness check. Empty 200 body."""
    return Response(status_code=status.HTTP_200_OK)

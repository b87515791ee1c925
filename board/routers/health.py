from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/api/ping")
def ping():
    return {"status": "ok"}

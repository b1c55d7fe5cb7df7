from fastapi import APIRouter

router = APIRouter()


@router.get("/health", summary="Health Check", description="Report whether the optimizer service is up.")
async def health_check():
    return {"status": "healthy"}

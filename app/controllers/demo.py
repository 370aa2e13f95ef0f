from app.controllers.routing import CallLoggingRouter
from app.types import CommonResponse

router = CallLoggingRouter(tags=["demo"])


@router.get("/test", response_model=CommonResponse)
def test() -> CommonResponse:
    return CommonResponse.success()

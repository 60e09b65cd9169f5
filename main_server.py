from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from logan.errors import MISSING_KEY_MESSAGE, ConfigError, UpstreamError
from logan.chat_router import router as chat_router
from logan.generate_router import router as generate_router
from logan.workouts_router import router as workouts_router
from logan.session_router import router as session_router


app = FastAPI(
    title="Logan AI 피트니스 코치",
    version="1.0.0"
)

app.include_router(chat_router)
app.include_router(generate_router)
app.include_router(workouts_router)
app.include_router(session_router)


# 모든 오류 응답은 {"error": "..."} 형태
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    fields = [".".join(str(p) for p in err.get("loc", [])[1:]) or "body" for err in exc.errors()]
    print(f"[MainServer] 요청 검증 실패: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": f"Invalid request: {', '.join(fields)}"})


@app.exception_handler(ConfigError)
async def config_error_handler(request: Request, exc: ConfigError):
    return JSONResponse(status_code=500, content={"error": MISSING_KEY_MESSAGE})


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    return JSONResponse(status_code=500,
                        content={"error": exc.user_message("Failed to generate response. Please try again.")})


@app.get("/", summary="Health Check")
def health_check():
    return {"status": "ok"}

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)

import os
import logging
from typing import List, Optional, Union

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pymongo.database import Database
from starlette.middleware.base import BaseHTTPMiddleware

import config
import database
from database import get_db
from errors import QuizError, StoreError
from schemas import WrongAnswer
from stores import ProblemStore, ResultStore

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("quiz")

app = FastAPI(title="Two-Level Quiz API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
)


class LogRequestMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        logger.info(f"{request.method} {request.url.path}")
        if logger.isEnabledFor(logging.DEBUG) and request.method in ("POST", "PUT"):
            body = await request.body()
            logger.debug(f"body={body.decode('utf-8', errors='replace')}")
        return await call_next(request)

app.add_middleware(LogRequestMiddleware)


@app.on_event("startup")
def on_startup():
    database.connect()


@app.on_event("shutdown")
def on_shutdown():
    database.disconnect()


# -----------------
# Error mapping
# -----------------

@app.exception_handler(QuizError)
async def quiz_error_handler(request: Request, exc: QuizError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Invalid request body for {request.url.path}: {exc.errors()}")
    fields = ", ".join(".".join(str(p) for p in e["loc"][1:]) or "body" for e in exc.errors())
    return JSONResponse(status_code=400, content={"message": f"Invalid request: {fields}"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


# -----------------
# Request models
# -----------------

class ProblemIn(BaseModel):
    # all optional so that missing fields reach the store check (400, not 422)
    mainCategory: Optional[str] = None
    subCategory: Optional[str] = None
    problem: Optional[str] = None
    translation: Optional[str] = None
    image: Optional[str] = None

class ResultIn(BaseModel):
    user: Optional[str] = None
    mainCategory: Optional[str] = None
    subCategory: Optional[str] = None
    score: Optional[Union[int, float]] = None
    wrongSentenceCount: Optional[int] = None
    totalCount: Optional[int] = None
    attemptedCount: Optional[int] = None
    wrongAnswers: Optional[List[WrongAnswer]] = None
    status: Optional[str] = None


def problem_store(db: Database = Depends(get_db)) -> ProblemStore:
    return ProblemStore(db["problem"])


def result_store(db: Database = Depends(get_db)) -> ResultStore:
    return ResultStore(db["result"])


# -----------------
# Basic routes
# -----------------

@app.get("/")
def read_root():
    return {"message": "Quiz backend server (2-level categories)"}

@app.get("/test")
def test_database():
    response = {
        "backend": "Running",
        "database": "Not Available",
        "database_url": "Set" if os.getenv("DATABASE_URL") else "Not Set",
        "database_name": None,
        "collections": [],
    }
    try:
        db = get_db()
    except StoreError as e:
        response["database"] = e.message
        return response
    response["database_name"] = db.name
    try:
        response["collections"] = db.list_collection_names()[:10]
        response["database"] = "Connected & Working"
    except Exception as e:
        response["database"] = f"Connected but Error: {str(e)[:50]}"
    return response


# -----------------
# Problems
# -----------------

@app.post("/api/problems", status_code=201)
def create_problem(payload: ProblemIn, store: ProblemStore = Depends(problem_store)):
    return store.create(payload.model_dump(exclude_unset=True))

@app.get("/api/problems")
def list_problems(store: ProblemStore = Depends(problem_store)):
    return store.list_all()

# registered before /{problem_id} so "all" is never taken for an id
@app.delete("/api/problems/all")
@app.delete("/api/problems")
def delete_all_problems(store: ProblemStore = Depends(problem_store)):
    return store.delete_all()

@app.put("/api/problems/{problem_id}")
def update_problem(problem_id: str, payload: ProblemIn, store: ProblemStore = Depends(problem_store)):
    return store.update_by_id(problem_id, payload.model_dump(exclude_unset=True))

@app.delete("/api/problems/{problem_id}")
def delete_problem(problem_id: str, store: ProblemStore = Depends(problem_store)):
    return store.delete_by_id(problem_id)


# -----------------
# Results
# -----------------

@app.post("/api/results", status_code=201)
def create_result(payload: ResultIn, store: ResultStore = Depends(result_store)):
    data = payload.model_dump(exclude_unset=True)
    logger.debug(f"Received result data: {data}")
    return store.create(data)

@app.get("/api/results")
def list_results(
    user: Optional[str] = None,
    mainCategory: Optional[str] = None,
    subCategory: Optional[str] = None,
    store: ResultStore = Depends(result_store),
):
    return store.list(user=user, mainCategory=mainCategory, subCategory=subCategory)

@app.delete("/api/results/all")
@app.delete("/api/results")
def delete_all_results(store: ResultStore = Depends(result_store)):
    return store.delete_all()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)

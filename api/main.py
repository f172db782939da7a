import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from oscillator_core.errors import ConfigError
from oscillator_app.services import (AppState, FirstTimeService, SeriesService,
                                     SolveService, ValuesService)

logger = logging.getLogger(__name__)

app = FastAPI()

# local static servers used while developing the front-end
origins = [
    "http://127.0.0.1:5500",
    "http://localhost:5500",
    "null"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One AppState for the whole process: every client shares the last solved
# oscillator. Per-client sessions would key this by a session id.
app.state.session = AppState()


def _call(service, *args):
    try:
        return service.run(app.state.session, *args)
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (ConfigError, ValueError, TypeError, OverflowError) as e:
        logger.warning("Rejected request: %s", e)
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/oscillator/solve")
async def solve(payload: dict):
    return _call(SolveService(), payload)


@app.post("/oscillator/series")
async def series(payload: dict):
    return _call(SeriesService(), payload)


@app.post("/oscillator/values")
async def values(payload: dict):
    if "t" not in payload:
        raise HTTPException(status_code=400, detail="Missing time 't'.")
    return _call(ValuesService(), payload["t"])


@app.post("/oscillator/first-time")
async def first_time(payload: dict):
    return _call(FirstTimeService(), payload)

"""
FastAPI server exposing the film collection.
Endpoints:
- GET /health: readiness plus the persistence warning, if any
- GET /films?genre=&year=&country=&q=: filtered collection
- GET /facets: filter option lists
- GET /films/{id}: one film with localized display fields and image URLs
- GET /metadata/search?q=: search the metadata provider
- POST /films: add a film by its metadata id
- PATCH /films/{id}: save an edit form
- DELETE /films/{id}?confirm=true: delete a film
- GET /export?format=jsonl|csv: download the collection

Startup builds the application context and loads the collection once.
"""

# Import standard libraries for timing and in-memory files
import io  # export buffers
import time  # measure startup and request latencies
from contextlib import asynccontextmanager  # lifespan hook
from typing import List, Optional  # precise typing for clarity

# Import FastAPI for building the web API and Pydantic for request/response models
from fastapi import FastAPI, HTTPException, Query, Request  # FastAPI primitives
from fastapi.responses import Response  # raw export downloads
from pydantic import BaseModel  # request/response schema definitions

# Import our internal modules
from moviary.app_context import AppContext, build_context  # wiring of store/client/cache
from moviary.exporter import export_csv, export_jsonl  # export formats
from moviary.filters import apply_filters  # stateless filtering per request
from moviary.models import ALL, FilmRecord, FilterCriteria, UpdateOutcome  # data classes
from moviary.tmdb_client import MetadataClient  # image URLs

# Import loguru for simple, structured console logging
from loguru import logger  # convenient console logger

# Globals that hold the application context and measured startup time
CONTEXT: Optional[AppContext] = None  # set on startup (or by tests beforehand)
STARTUP_TIME_S: float = 0.0  # measures how long startup took


# Pydantic model that describes the shape of a single film in responses
class FilmOut(BaseModel):
	id: Optional[int] = None  # store id
	tmdb_id: int  # metadata provider id
	title: str  # stored title
	poster_path: str = ''
	backdrop_path: str = ''
	overview: str = ''
	release_date: str = ''
	vote_average: float = 0.0
	runtime: int = 0
	genres: List[str] = []
	origin_country: List[str] = []
	trailer_key: str = ''
	created_at: Optional[str] = None
	storage_locations: Optional[List[str]] = None


# Film plus what the detail view needs to render it
class FilmDetailOut(FilmOut):
	display_title: str  # localized title when available
	display_poster_path: str  # localized poster when available
	poster_url: str = ''
	backdrop_url: str = ''
	trailer_url: str = ''


class CriteriaOut(BaseModel):
	genre: str
	year: str
	country: str
	q: str


class FilmListResponse(BaseModel):
	criteria: CriteriaOut  # what was applied
	total: int  # size of the full collection
	count: int  # size of the filtered view
	films: List[FilmOut]


class FacetsOut(BaseModel):
	genres: List[str]
	years: List[str]
	countries: List[str]


class SearchHitOut(BaseModel):
	tmdb_id: int
	title: str
	poster_url: str = ''
	release_date: str = ''
	vote_average: float = 0.0


class AddFilmIn(BaseModel):
	tmdb_id: int


# Every field optional: only what the form sends is updated
class EditFilmIn(BaseModel):
	tmdb_id: Optional[str] = None
	title: Optional[str] = None
	poster_path: Optional[str] = None
	backdrop_path: Optional[str] = None
	overview: Optional[str] = None
	release_date: Optional[str] = None
	vote_average: Optional[str] = None
	runtime: Optional[str] = None
	genres: Optional[str] = None
	origin_country: Optional[str] = None
	trailer_key: Optional[str] = None
	storage_locations: Optional[str] = None


class ActionOut(BaseModel):
	ok: bool
	message: str = ''
	outcome: Optional[str] = None
	film: Optional[FilmOut] = None


def _film_out(record: FilmRecord) -> FilmOut:
	"""Convert a FilmRecord into the wire-shaped response model."""
	return FilmOut(
		id=record.id,
		tmdb_id=record.external_id,
		title=record.title,
		poster_path=record.poster_path,
		backdrop_path=record.backdrop_path,
		overview=record.overview,
		release_date=record.release_date,
		vote_average=record.vote_average,
		runtime=record.runtime_minutes,
		genres=record.genres,
		origin_country=record.origin_countries,
		trailer_key=record.trailer_key,
		created_at=record.created_at,
		storage_locations=record.storage_locations,
	)


def _context() -> AppContext:
	if CONTEXT is None:  # engine must be ready to serve
		logger.warning("[API] Request received before startup completed")
		raise HTTPException(status_code=503, detail="Service is starting")
	return CONTEXT


# Lifespan hook to initialize the context once at startup
@asynccontextmanager
async def lifespan(_app: FastAPI):
	"""Build the context (unless one was injected) and load the collection."""
	global CONTEXT, STARTUP_TIME_S  # refer to module-level globals
	start = time.time()  # start timer for startup latency

	logger.info("[API] Startup: building context and loading films...")
	if CONTEXT is None:
		CONTEXT = build_context()
	result = CONTEXT.library.reload()
	if not result.ok:
		logger.error(f"[API] Initial load failed: {result.message}")

	STARTUP_TIME_S = time.time() - start  # elapsed seconds
	logger.info(f"[API] Startup complete in {STARTUP_TIME_S:.2f}s with {len(CONTEXT.view.collection)} films.")
	yield


# Instantiate the FastAPI application with metadata
app = FastAPI(title="Moviary API", version="1.0.0", lifespan=lifespan)  # web app


# Deferred notifications queued while handling a request run after it
@app.middleware("http")
async def drain_scheduler(request: Request, call_next):
	response = await call_next(request)
	if CONTEXT is not None:
		CONTEXT.scheduler.run_pending()
	return response


# Simple health endpoint for readiness checks
@app.get("/health")
async def health():
	"""Return minimal health info, including the missing-configuration warning."""
	return {
		"status": "ok",  # constant indicator
		"ready": CONTEXT is not None,
		"persistence_configured": bool(CONTEXT and CONTEXT.settings.persistence_configured),
		"warning": CONTEXT.warning if CONTEXT else None,
		"film_count": len(CONTEXT.view.collection) if CONTEXT else 0,
		"startup_seconds": round(STARTUP_TIME_S, 2),  # startup latency
	}


@app.get("/films", response_model=FilmListResponse)
def list_films(
	genre: str = ALL,
	year: str = ALL,
	country: str = ALL,
	q: str = Query("", description="Substring of title or genre"),
):
	"""Apply the filters to the in-memory collection. The shared view is left untouched."""
	ctx = _context()
	criteria = FilterCriteria(genre=genre, year=year, country=country, search_term=q)
	collection = ctx.view.collection  # one snapshot per request
	films = apply_filters(collection, criteria)
	logger.debug(f"[API] /films {criteria} -> {len(films)}")
	return FilmListResponse(
		criteria=CriteriaOut(genre=criteria.genre, year=criteria.year, country=criteria.country, q=criteria.search_term),
		total=len(collection),
		count=len(films),
		films=[_film_out(f) for f in films],
	)


@app.get("/facets", response_model=FacetsOut)
def facets():
	f = _context().view.facets
	return FacetsOut(genres=f.genres, years=f.years, countries=f.countries)


@app.get("/films/{film_id}", response_model=FilmDetailOut)
def film_detail(film_id: int):
	ctx = _context()
	record = ctx.library.get(film_id)
	if record is None:
		raise HTTPException(status_code=404, detail="Film not found")

	title, poster = ctx.localization.display_fields(record)
	return FilmDetailOut(
		**_film_out(record).model_dump(),
		display_title=title,
		display_poster_path=poster,
		poster_url=MetadataClient.build_image_url(poster, 'w300'),
		backdrop_url=MetadataClient.build_image_url(record.backdrop_path, 'w1280'),
		trailer_url=f"https://www.youtube.com/embed/{record.trailer_key}" if record.trailer_key else '',
	)


@app.get("/metadata/search", response_model=List[SearchHitOut])
def metadata_search(q: str = Query(..., description="Film title to look up")):
	result = _context().library.search_metadata(q)
	if not result.ok:
		raise HTTPException(status_code=502, detail=result.message)
	return [
		SearchHitOut(
			tmdb_id=h.external_id,
			title=h.title,
			poster_url=MetadataClient.build_image_url(h.poster_path, 'w92'),
			release_date=h.release_date,
			vote_average=h.vote_average,
		)
		for h in result.data
	]


@app.post("/films", response_model=ActionOut, status_code=201)
def add_film(body: AddFilmIn):
	result = _context().library.add_from_search(body.tmdb_id)
	if result.notice:
		raise HTTPException(status_code=409, detail=result.message)
	if not result.ok:
		raise HTTPException(status_code=502, detail=result.message)
	return ActionOut(ok=True, message=result.message, film=_film_out(result.data))


@app.patch("/films/{film_id}", response_model=ActionOut)
def edit_film(film_id: int, body: EditFilmIn):
	form = body.model_dump(exclude_none=True)
	result = _context().library.save_edit(film_id, form)
	if result.outcome == UpdateOutcome.FAILED:
		raise HTTPException(status_code=502, detail=result.message)
	return ActionOut(ok=True, message=result.message, outcome=result.outcome.value)


@app.delete("/films/{film_id}", response_model=ActionOut)
def delete_film(film_id: int, confirm: bool = False):
	result = _context().library.delete_film(film_id, confirmed=confirm)
	if result.notice:
		raise HTTPException(status_code=400, detail=result.message)
	if not result.ok:
		raise HTTPException(status_code=502, detail=result.message)
	return ActionOut(ok=True, message=result.message)


@app.get("/export")
def export(format: str = Query("jsonl", pattern="^(jsonl|csv)$")):
	"""Download the full collection (not the filtered view)."""
	films = _context().view.collection
	buffer = io.StringIO()
	if format == "csv":
		export_csv(films, buffer)
		media_type = "text/csv"
	else:
		export_jsonl(films, buffer)
		media_type = "application/x-ndjson"
	return Response(
		content=buffer.getvalue(),
		media_type=media_type,
		headers={"Content-Disposition": f'attachment; filename="films.{format}"'},
	)

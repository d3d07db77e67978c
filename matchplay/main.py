import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as PayloadError

from matchplay.course import DEFAULT_COURSE_HOLES, SEGMENTS, segment_for_hole, segment_holes
from matchplay.course_sync import import_course_holes
from matchplay.db import open_store
from matchplay.errors import ConflictError, NotFoundError, ScheduleError, ValidationError
from matchplay.golf_api import GolfApiError, search_courses
from matchplay.leaderboard import LeaderboardAggregator
from matchplay.matchups import (
    Matchup,
    Schedule,
    find_matchup,
    load_schedule,
    match_display,
    matchup_for_player,
    validate_round_robin,
)
from matchplay.scoring import (
    MatchResult,
    MatchResultRecorder,
    PointScale,
    net_scorecard,
    parse_point_scale,
    swap_hole_scores,
)
from matchplay.settings import Settings, load_settings
from matchplay.strokes import StrokeAllocation, StrokeAllocator

logger = logging.getLogger(__name__)
settings = load_settings()


@dataclass
class Services:
    settings: Settings
    store: object
    schedule: Schedule
    scale: PointScale
    allocator: StrokeAllocator
    recorder: MatchResultRecorder
    aggregator: LeaderboardAggregator


def build_services(config: Settings) -> Services:
    allocator = StrokeAllocator(config.stroke_divisor, config.stroke_cap)
    schedule = load_schedule(config.tournament_config, allocator)
    try:
        validate_round_robin(schedule.matchups, schedule.foursomes)
    except ScheduleError as exc:
        for problem in exc.problems:
            logger.error("Schedule problem: %s", problem)
        raise
    scale = parse_point_scale(config.point_scale or schedule.point_scale)
    store = open_store(config.database_url)
    store.ensure_schema()
    course_holes = store.fetch_course_holes(schedule.course) or list(DEFAULT_COURSE_HOLES)
    logger.info(
        "Match play ready for %s (%s scale, 1 stroke per %d, max %d)",
        schedule.year,
        scale.label,
        allocator.divisor,
        allocator.cap,
    )
    return Services(
        settings=config,
        store=store,
        schedule=schedule,
        scale=scale,
        allocator=allocator,
        recorder=MatchResultRecorder(store, schedule, scale, course_holes, allocator),
        aggregator=LeaderboardAggregator(store, schedule),
    )


def _services() -> Services:
    services = getattr(app.state, "services", None)
    if services is None:
        services = build_services(settings)
        app.state.services = services
    return services


@asynccontextmanager
async def lifespan(application: FastAPI):
    application.state.services = build_services(settings)
    yield


app = FastAPI(title="Gambler Cup Match Play", lifespan=lifespan)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    body = {"error": str(exc)}
    if isinstance(exc, ScheduleError):
        body["problems"] = exc.problems
    return JSONResponse(body, status_code=422)


@app.exception_handler(ConflictError)
async def conflict_error_handler(request: Request, exc: ConflictError):
    return JSONResponse({"error": str(exc)}, status_code=409)


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    return JSONResponse({"error": str(exc)}, status_code=404)


@app.exception_handler(GolfApiError)
async def golf_api_error_handler(request: Request, exc: GolfApiError):
    return JSONResponse({"error": str(exc)}, status_code=502)


def _results_by_key(services: Services, foursome_id: int | None = None) -> dict[tuple, MatchResult]:
    results = services.store.fetch_match_results(services.schedule.year, foursome_id)
    return {
        (r.foursome_id, r.player1_id, r.player2_id, r.hole_segment): r
        for r in results
    }


def _matchup_payload(
    services: Services, matchup: Matchup, result: MatchResult | None = None
) -> dict:
    players = services.schedule.players
    first = players[matchup.player1_id]
    second = players[matchup.player2_id]
    allocation = services.recorder.allocation_for(first.player_id, second.player_id, matchup.hole_segment)
    return {
        "foursome_id": matchup.foursome_id,
        "display": match_display(matchup, players),
        "hole_segment": matchup.hole_segment,
        "player1": {"id": first.player_id, "name": first.name, "handicap": first.handicap},
        "player2": {"id": second.player_id, "name": second.name, "handicap": second.handicap},
        "strokes": matchup.stroke_description,
        **allocation.as_dict(),
        "status": "completed" if result else "pending",
        "result": result.as_dict() if result else None,
    }


def _result_body(services: Services, result: MatchResult, hole_scores: list[dict] | None) -> dict:
    """Result JSON, plus a per-hole scorecard in the result's player order when holes were sent."""
    body = result.as_dict()
    if hole_scores:
        allocation = StrokeAllocation(
            result.strokes_given, result.stroke_recipient_id, list(result.stroke_holes)
        )
        body["scorecard"] = net_scorecard(
            hole_scores,
            allocation,
            result.player1_id,
            result.player2_id,
            segment_holes(result.hole_segment, services.recorder.course_holes),
        )
    return body


@app.get("/api/config")
async def api_config():
    services = _services()
    return {
        "year": services.schedule.year,
        "name": services.schedule.name,
        "course": services.schedule.course,
        "point_scale": {
            "label": services.scale.label,
            "win": services.scale.win,
            "tie": services.scale.tie,
            "loss": services.scale.loss,
        },
        "stroke_divisor": services.allocator.divisor,
        "stroke_cap": services.allocator.cap,
        "segments": list(SEGMENTS),
    }


@app.get("/api/matchups")
async def api_matchups(foursome: int | None = None):
    services = _services()
    results = _results_by_key(services, foursome)
    return [
        _matchup_payload(services, matchup, results.get(matchup.key))
        for matchup in services.schedule.matchups_for(foursome)
    ]


@app.get("/api/matchups/strokes")
async def api_matchup_strokes(foursome: int, player1: int, player2: int, segment: str):
    services = _services()
    matchup = find_matchup(services.schedule.matchups, foursome, player1, player2, segment)
    if not matchup:
        raise HTTPException(status_code=404, detail="Matchup not found")
    return _matchup_payload(services, matchup, _results_by_key(services, foursome).get(matchup.key))


@app.get("/api/match-results")
async def api_match_results(foursome: int | None = None):
    services = _services()
    results = services.store.fetch_match_results(services.schedule.year, foursome)
    return [result.as_dict() for result in results]


@app.get("/api/match-results/{result_id}")
async def api_match_result(result_id: int):
    result = _services().store.fetch_match_result(result_id)
    if not result:
        raise HTTPException(status_code=404, detail="Match result not found")
    return result.as_dict()


class HoleScorePayload(BaseModel):
    hole_number: int
    player1_score: int
    player2_score: int


class ResultPayload(BaseModel):
    tournament_year: int | None = None
    foursome_id: int
    player1_id: int
    player2_id: int
    hole_segment: str
    gross_score1: int | None = None
    gross_score2: int | None = None
    hole_scores: list[HoleScorePayload] | None = None
    submitted_by: int | None = None


@app.post("/api/match-results")
async def api_record_result(request: Request):
    try:
        payload = ResultPayload.model_validate(await request.json())
    except PayloadError as exc:
        return JSONResponse(
            {"error": "Invalid payload", "details": exc.errors(include_url=False)},
            status_code=422,
        )

    if payload.submitted_by is not None and payload.submitted_by not in (
        payload.player1_id,
        payload.player2_id,
    ):
        logger.warning(
            "Player %s tried to submit %s vs %s",
            payload.submitted_by,
            payload.player1_id,
            payload.player2_id,
        )
        return JSONResponse(
            {"error": "Only the two players in a matchup can submit its result"},
            status_code=403,
        )

    services = _services()
    hole_scores = [entry.model_dump() for entry in payload.hole_scores] if payload.hole_scores else None
    result = services.recorder.record(
        payload.tournament_year or services.schedule.year,
        payload.foursome_id,
        payload.player1_id,
        payload.player2_id,
        payload.hole_segment,
        gross_score1=payload.gross_score1,
        gross_score2=payload.gross_score2,
        hole_scores=hole_scores,
    )
    if hole_scores and payload.player1_id != result.player1_id:
        hole_scores = swap_hole_scores(hole_scores)
    return JSONResponse(_result_body(services, result, hole_scores), status_code=201)


class CorrectionPayload(BaseModel):
    gross_score1: int | None = None
    gross_score2: int | None = None
    hole_scores: list[HoleScorePayload] | None = None


@app.put("/api/match-results/{result_id}")
async def api_correct_result(result_id: int, request: Request):
    try:
        payload = CorrectionPayload.model_validate(await request.json())
    except PayloadError as exc:
        return JSONResponse(
            {"error": "Invalid payload", "details": exc.errors(include_url=False)},
            status_code=422,
        )

    services = _services()
    hole_scores = [entry.model_dump() for entry in payload.hole_scores] if payload.hole_scores else None
    result = services.recorder.correct(
        result_id,
        gross_score1=payload.gross_score1,
        gross_score2=payload.gross_score2,
        hole_scores=hole_scores,
    )
    return _result_body(services, result, hole_scores)


@app.get("/api/leaderboard")
async def api_leaderboard(foursome: int | None = None):
    services = _services()
    standings = services.aggregator.compute(services.schedule.year, foursome)
    return [
        {"rank": rank, **standing.as_dict()}
        for rank, standing in enumerate(standings, 1)
    ]


@app.get("/api/current-match/{player_id}/{hole}")
async def api_current_match(player_id: int, hole: int):
    services = _services()
    services.schedule.player(player_id)
    segment = segment_for_hole(hole)
    matchup = matchup_for_player(services.schedule.matchups, player_id, segment)
    if not matchup:
        raise HTTPException(status_code=404, detail="No matchup for this player on these holes")
    result = _results_by_key(services, matchup.foursome_id).get(matchup.key)
    payload = _matchup_payload(services, matchup, result)
    payload["opponent_id"] = matchup.opponent_of(player_id)
    payload["stroke_hole"] = hole in payload["stroke_holes"]
    return payload


@app.get("/api/courses/search")
async def api_course_search(q: str = ""):
    return {"courses": search_courses(q, _services().settings.golf_api_key)}


@app.post("/api/courses/import/{course_id}")
async def api_course_import(course_id: int):
    services = _services()
    summary = import_course_holes(
        services.store,
        course_id,
        services.settings.golf_api_key,
        services.schedule.course,
    )
    services.recorder.course_holes = services.store.fetch_course_holes(services.schedule.course)
    return summary

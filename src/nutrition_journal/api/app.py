"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from nutrition_journal.api.models import FoodEntryPayload, ImportPayload
from nutrition_journal.app_logging import configure_logging
from nutrition_journal.containers import AppContainer
from nutrition_journal.domain.errors import StorageError, ValidationError
from nutrition_journal.domain.records import (
    analysis_to_record,
    deficiency_to_record,
    entry_to_record,
    export_to_record,
    import_result_to_record,
    stats_to_record,
    summary_to_record,
    trend_analysis_to_record,
)
from nutrition_journal.services.goals import analyze_goals, meal_timing
from nutrition_journal.services.trends import analyze_trends, identify_deficiencies


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await app.state.container.entry_store.initialize()
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.errors},
        )

    @app.exception_handler(StorageError)
    async def storage_error(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("Storage failure: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/entries", status_code=status.HTTP_201_CREATED)
    async def create_entry(
        payload: FoodEntryPayload, request: Request
    ) -> dict[str, object]:
        """Log a new entry, or replace one with the same id."""
        store = request.app.state.container.entry_store
        entry = await store.save_entry(payload.to_entry(store.clock()))
        return entry_to_record(entry)

    @app.put("/entries/{entry_id}")
    async def update_entry(
        entry_id: str, payload: FoodEntryPayload, request: Request
    ) -> dict[str, object]:
        """Replace an entry in a day that has already been loaded."""
        store = request.app.state.container.entry_store
        entry = payload.model_copy(update={"id": entry_id}).to_entry(store.clock())
        if not await store.update_entry(entry):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return entry_to_record(entry)

    @app.delete("/entries/{entry_id}")
    async def delete_entry(
        entry_id: str, request: Request, day: date | None = None
    ) -> dict[str, bool]:
        """Delete an entry; without a day only recent days are searched."""
        store = request.app.state.container.entry_store
        if not await store.delete_entry(entry_id, day):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"deleted": True}

    @app.get("/entries/{day}")
    async def entries_for_day(day: date, request: Request) -> dict[str, object]:
        """Return one day's entries in timestamp order."""
        store = request.app.state.container.entry_store
        entries = await store.get_entries_for_date(day)
        return {"entries": [entry_to_record(entry) for entry in entries]}

    @app.get("/entries")
    async def entries_for_range(
        start: date, end: date, request: Request
    ) -> dict[str, object]:
        """Return entries for an inclusive range of days."""
        store = request.app.state.container.entry_store
        entries = await store.get_entries_for_range(start, end)
        return {"entries": [entry_to_record(entry) for entry in entries]}

    @app.get("/summaries/{day}")
    async def summary_for_day(day: date, request: Request) -> dict[str, object]:
        """Return one day's nutrition summary."""
        store = request.app.state.container.entry_store
        return summary_to_record(await store.get_daily_summary(day))

    @app.get("/summaries")
    async def summaries_for_range(
        start: date, end: date, request: Request
    ) -> dict[str, object]:
        """Return one summary per day of an inclusive range."""
        store = request.app.state.container.entry_store
        summaries = await store.get_summaries_for_range(start, end)
        return {"summaries": [summary_to_record(summary) for summary in summaries]}

    @app.get("/analysis/{day}")
    async def analysis_for_day(day: date, request: Request) -> dict[str, object]:
        """Return goal progress, recommendations and meal timing for a day."""
        state_container: AppContainer = request.app.state.container
        summary = await state_container.entry_store.get_daily_summary(day)
        record = analysis_to_record(analyze_goals(summary, state_container.goals))
        timing = meal_timing(summary)
        record["mealTiming"] = {
            "ideal": vars(timing.ideal),
            "actual": vars(timing.actual),
            "recommendations": timing.recommendations,
        }
        return record

    @app.get("/trends")
    async def trends(start: date, end: date, request: Request) -> dict[str, object]:
        """Return trend analysis and deficiencies for a window of days."""
        state_container: AppContainer = request.app.state.container
        summaries = await state_container.entry_store.get_summaries_for_range(
            start, end
        )
        record = trend_analysis_to_record(
            analyze_trends(summaries, state_container.goals)
        )
        record["deficiencies"] = [
            deficiency_to_record(deficiency)
            for deficiency in identify_deficiencies(summaries, state_container.goals)
        ]
        return record

    @app.get("/export")
    async def export(
        request: Request, start: date | None = None, end: date | None = None
    ) -> dict[str, object]:
        """Export entries and summaries, defaulting to the trailing year."""
        store = request.app.state.container.entry_store
        return export_to_record(await store.export_range(start, end))

    @app.post("/import")
    async def import_entries(
        payload: ImportPayload, request: Request
    ) -> dict[str, int]:
        """Import entry records, skipping ids that are already stored."""
        store = request.app.state.container.entry_store
        result = await store.import_entries(payload.entries)
        return import_result_to_record(result)

    @app.get("/storage/stats")
    async def storage_stats(request: Request) -> dict[str, object]:
        """Return figures about the cached data."""
        store = request.app.state.container.entry_store
        return stats_to_record(await store.storage_stats())

    @app.delete("/storage")
    async def clear_storage(request: Request) -> dict[str, str]:
        """Delete every stored entry, document and backup."""
        store = request.app.state.container.entry_store
        await store.clear_all()
        return {"status": "cleared"}

    return app

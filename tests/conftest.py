"""Shared test fixtures."""

import copy
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta

import pytest

from nutrition_journal.config import Settings
from nutrition_journal.containers import AppContainer
from nutrition_journal.domain.entries import FoodEntry, FoodItem, Meal, NutritionFacts
from nutrition_journal.domain.goals import NutritionGoals
from nutrition_journal.domain.storage import StoredFile
from nutrition_journal.services.backups import BackupManager
from nutrition_journal.services.entries import EntryStore
from nutrition_journal.services.storage import (
    FileRepository,
    StateRepository,
    StorageSettings,
)

TODAY = date(2024, 3, 15)


@dataclass
class InMemoryStateRepository(StateRepository):
    """In-memory aggregate store for tests."""

    state: dict[str, object] = field(default_factory=dict)
    fail_loads: bool = False
    fail_saves: bool = False
    saves: int = 0
    loads: int = 0

    async def load_state(self) -> dict[str, object]:
        if self.fail_loads:
            raise OSError("state unavailable")
        self.loads += 1
        return copy.deepcopy(self.state)

    async def save_state(self, state: dict[str, object]) -> None:
        if self.fail_saves:
            raise OSError("state is read-only")
        self.saves += 1
        self.state = copy.deepcopy(state)


@dataclass
class InMemoryFileRepository(FileRepository):
    """In-memory file store; every write gets a later creation time.

    With ``coarse_mtime`` every file reports the same creation time.
    """

    files: dict[str, str] = field(default_factory=dict)
    created: dict[str, datetime] = field(default_factory=dict)
    fail_reads: bool = False
    fail_writes: bool = False
    coarse_mtime: bool = False
    _tick: int = 0

    async def read_text(self, path: str) -> str | None:
        if self.fail_reads:
            raise OSError("files unavailable")
        return self.files.get(path)

    async def write_text(self, path: str, content: str) -> None:
        if self.fail_writes:
            raise OSError("files are read-only")
        self._tick += 1
        self.files[path] = content
        self.created[path] = datetime(2024, 1, 1, tzinfo=UTC) + timedelta(
            seconds=0 if self.coarse_mtime else self._tick
        )

    async def delete(self, path: str) -> None:
        self.files.pop(path, None)
        self.created.pop(path, None)

    async def list_files(self, folder: str) -> list[StoredFile]:
        prefix = folder.rstrip("/") + "/"
        return [
            StoredFile(path=path, created_at=self.created[path])
            for path in self.files
            if path.startswith(prefix)
        ]


@dataclass
class StepClock:
    """Clock that advances by one millisecond on every call."""

    current: datetime = datetime(2024, 3, 15, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.current += timedelta(milliseconds=1)
        return self.current


def make_item(
    name: str = "Oats",
    calories: float = 389,
    protein: float = 16.9,
    carbs: float = 66.3,
    fat: float = 6.9,
    serving_size: float = 100,
    **extra: float,
) -> FoodItem:
    return FoodItem(
        id=name.lower(),
        name=name,
        category="grains",
        serving_size=serving_size,
        serving_unit="g",
        nutrition=NutritionFacts(
            calories=calories, protein=protein, carbs=carbs, fat=fat, **extra
        ),
    )


def make_entry(
    entry_id: str = "e1",
    day: date = TODAY,
    meal: Meal = Meal.BREAKFAST,
    quantity: float = 1,
    item: FoodItem | None = None,
    minute: int = 0,
    notes: str | None = None,
) -> FoodEntry:
    return FoodEntry(
        id=entry_id,
        date=day,
        timestamp=datetime(day.year, day.month, day.day, 8, minute, tzinfo=UTC),
        food_item=item or make_item(),
        quantity=quantity,
        meal=meal,
        notes=notes,
    )


@pytest.fixture
def state_repository() -> InMemoryStateRepository:
    return InMemoryStateRepository()


@pytest.fixture
def file_repository() -> InMemoryFileRepository:
    return InMemoryFileRepository()


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def storage_settings() -> StorageSettings:
    return StorageSettings(max_backups=3)


@pytest.fixture
def backups(file_repository: InMemoryFileRepository, clock: StepClock) -> BackupManager:
    return BackupManager(files=file_repository, version="1.0.0", clock=clock)


@pytest.fixture
def store(
    state_repository: InMemoryStateRepository,
    file_repository: InMemoryFileRepository,
    backups: BackupManager,
    storage_settings: StorageSettings,
    clock: StepClock,
) -> EntryStore:
    return EntryStore(
        state_repository=state_repository,
        file_repository=file_repository,
        backups=backups,
        settings=storage_settings,
        clock=clock,
    )


@pytest.fixture
def goals() -> NutritionGoals:
    return NutritionGoals(calories=2000, protein=150, carbs=250, fat=65)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(data_dir=tmp_path, environment="test")


@pytest.fixture
def container(
    settings: Settings, goals: NutritionGoals, store: EntryStore
) -> AppContainer:
    async def close_resources() -> None:
        store.dispose()

    return AppContainer(
        settings=settings,
        goals=goals,
        entry_store=store,
        close_resources=close_resources,
    )

"""Flip-book state: physical pages, page-turn stepping and lazy textures.

The book has one physical sheet per content page plus the cover sheet. Sheet
``n`` shows logical page ``n`` on its front and the next logical page on its
back, so the last sheet's back is the back cover.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Optional

import structlog
from PIL import Image

from book.page_data import PageDataCache
from book.spine import (
    EASING_FACTOR,
    EASING_FACTOR_FOLD,
    PAGE_DEPTH,
    damp_angle,
    spine_angles,
    turning_progress,
)
from book.textures import TEXTURE_SIZE, ImageLoader, TextureGenerator, loading_texture

logger = structlog.get_logger()

FAST_STEP_INTERVAL = 0.05
SLOW_STEP_INTERVAL = 0.15
# Further than this from the target, the cursor moves at the fast interval.
FAST_STEP_DISTANCE = 2

Sleep = Callable[[float], Awaitable[None]]
RenderPage = Callable[[int], Awaitable[Image.Image]]


def back_cover_index(content_page_count: int) -> int:
    return content_page_count + 1


@dataclass(frozen=True, slots=True)
class PageState:
    """One physical sheet of the book at a given cursor position."""

    physical_slot: int
    front_page: int
    back_page: int
    opened: bool
    book_closed: bool


def build_pages(content_page_count: int, cursor: int) -> list[PageState]:
    """Physical sheets for a book with ``content_page_count`` content pages.

    A sheet is open once the cursor has moved past its front page. The book
    counts as closed while the cursor sits on either cover.
    """
    back_cover = back_cover_index(content_page_count)
    book_closed = cursor in (0, back_cover)

    pages = [
        PageState(
            physical_slot=0,
            front_page=0,
            back_page=1,
            opened=cursor > 0,
            book_closed=book_closed,
        )
    ]
    for page_number in range(1, content_page_count + 1):
        pages.append(
            PageState(
                physical_slot=page_number,
                front_page=page_number,
                back_page=back_cover if page_number == content_page_count else page_number + 1,
                opened=cursor > page_number,
                book_closed=book_closed,
            )
        )
    return pages


def pages_to_load(cursor: int, back_cover: int) -> list[int]:
    """Both covers plus the current page and its neighbours, without repeats."""
    wanted = [0, back_cover, cursor, max(0, cursor - 1), min(back_cover, cursor + 1)]
    return list(dict.fromkeys(wanted))


def step_interval(visible: int, target: int) -> float:
    if abs(target - visible) > FAST_STEP_DISTANCE:
        return FAST_STEP_INTERVAL
    return SLOW_STEP_INTERVAL


class PageTurner:
    """Moves the visible page toward the requested one, one page per tick.

    The first step happens right away; each later step waits ``step_interval``
    measured from where the cursor stood before the previous step.
    Changing the target mid-flight just redirects the running walk.
    """

    def __init__(
        self,
        start: int = 0,
        on_step: Optional[Callable[[int], None]] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.visible = start
        self.target = start
        self._on_step = on_step
        self._sleep = sleep
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def is_turning(self) -> bool:
        return self._task is not None and not self._task.done()

    def go_to(self, page: int) -> asyncio.Task[None]:
        self.target = page
        if not self.is_turning:
            self._task = asyncio.ensure_future(self._walk())
        assert self._task is not None
        return self._task

    async def wait(self) -> None:
        if self._task is not None:
            await self._task

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()

    async def _walk(self) -> None:
        while self.visible != self.target:
            # The delay is chosen by the distance before this step.
            interval = step_interval(self.visible, self.target)
            self.visible += 1 if self.target > self.visible else -1
            if self._on_step is not None:
                self._on_step(self.visible)
            if self.visible != self.target:
                await self._sleep(interval)


class TextureStore:
    """Add-only cache of rendered page bitmaps.

    ``get`` never blocks: until a page's bitmap has been rendered it returns
    a locally drawn placeholder, which is dropped once the bitmap lands. A
    failed render is logged and the page keeps its placeholder.
    """

    def __init__(self, render: RenderPage, size: int = TEXTURE_SIZE) -> None:
        self._render = render
        self._size = size
        self._textures: dict[int, Image.Image] = {}
        self._loading: dict[int, asyncio.Task[None]] = {}
        self._placeholders: dict[int, Image.Image] = {}

    def __contains__(self, page_number: int) -> bool:
        return page_number in self._textures

    @property
    def loaded_pages(self) -> list[int]:
        return sorted(self._textures)

    def request(self, page_number: int) -> Optional[asyncio.Task[None]]:
        """Start rendering ``page_number`` unless it is loaded or in flight."""
        if page_number in self._textures:
            return None
        if page_number not in self._loading:
            self._loading[page_number] = asyncio.ensure_future(self._load(page_number))
        return self._loading[page_number]

    def get(self, page_number: int) -> Image.Image:
        texture = self._textures.get(page_number)
        if texture is not None:
            return texture
        if page_number not in self._placeholders:
            self._placeholders[page_number] = loading_texture(page_number, self._size)
        return self._placeholders[page_number]

    async def wait_idle(self) -> None:
        """Wait for every render in flight (including ones started meanwhile)."""
        while self._loading:
            await asyncio.gather(*self._loading.values())

    async def _load(self, page_number: int) -> None:
        try:
            self._textures[page_number] = await self._render(page_number)
            self._placeholders.pop(page_number, None)
            logger.debug("texture_loaded", page=page_number)
        except Exception as e:
            logger.error("texture_render_failed", page=page_number, error=str(e), exc_info=True)
        finally:
            self._loading.pop(page_number, None)


@dataclass
class _PageTrack:
    """Per-sheet animation memory: last open state, when it changed, angles."""

    opened: bool = False
    turned_at: float = float("-inf")
    yaws: list[float] = field(default_factory=list)
    pitches: list[float] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class PagePose:
    """Everything needed to draw one sheet for one frame."""

    state: PageState
    yaws: tuple[float, ...]
    pitches: tuple[float, ...]
    z_offset: float
    front_texture: Image.Image
    back_texture: Image.Image


class FlipBook:
    """Ties the page data, texture store and page turner together."""

    def __init__(
        self,
        cache: PageDataCache,
        image_loader: Optional[ImageLoader] = None,
        texture_size: int = TEXTURE_SIZE,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._cache = cache
        self._image_loader = image_loader
        self._texture_size = texture_size
        self._turner = PageTurner(on_step=self._on_step, sleep=sleep)
        self._tracks: dict[int, _PageTrack] = {}
        self.generator: Optional[TextureGenerator] = None
        self.textures: Optional[TextureStore] = None

    @property
    def is_ready(self) -> bool:
        return self.textures is not None

    @property
    def content_page_count(self) -> int:
        return self._cache.content_page_count

    @property
    def back_cover_index(self) -> int:
        return back_cover_index(self.content_page_count)

    @property
    def page(self) -> int:
        """The page the reader asked for."""
        return self._turner.target

    @property
    def visible_page(self) -> int:
        """The page the animation has reached so far."""
        return self._turner.visible

    @property
    def pages(self) -> list[PageState]:
        return build_pages(self.content_page_count, self.visible_page)

    @property
    def turner(self) -> PageTurner:
        return self._turner

    async def open(self) -> list[PageState]:
        """Load the feed (once) and start rendering the visible textures.

        A failed feed still opens the book, with covers only.
        """
        pages = await self._cache.load()
        size = self._texture_size
        generator = TextureGenerator(pages, image_loader=self._image_loader)
        self.generator = generator
        self.textures = TextureStore(
            lambda page_number: generator.render_page(page_number, size),
            size=size,
        )
        self.request_visible_textures()
        logger.info(
            "book_opened",
            content_pages=self.content_page_count,
            feed_error=self._cache.has_error,
        )
        return self.pages

    def go_to(self, page: int) -> asyncio.Task[None]:
        page = max(0, min(page, self.back_cover_index))
        return self._turner.go_to(page)

    def click(self, physical_slot: int) -> asyncio.Task[None]:
        """Clicking an open sheet turns back to it; a closed one turns past it."""
        state = self.pages[physical_slot]
        return self.go_to(state.front_page if state.opened else state.front_page + 1)

    def request_visible_textures(self) -> None:
        if self.textures is None:
            return
        for page_number in pages_to_load(self.visible_page, self.back_cover_index):
            self.textures.request(page_number)

    def frame(self, now: float, delta: float) -> list[PagePose]:
        """Advance every sheet's bone chain by ``delta`` seconds.

        ``now`` is a monotonic timestamp in seconds; it is recorded as the
        turn start whenever a sheet flips between open and closed.
        """
        if self.textures is None:
            return []

        poses: list[PagePose] = []
        for state in self.pages:
            track = self._tracks.setdefault(state.physical_slot, _PageTrack(opened=state.opened))
            if track.opened != state.opened:
                track.opened = state.opened
                track.turned_at = now

            targets = spine_angles(
                opened=state.opened,
                book_closed=state.book_closed,
                physical_slot=state.physical_slot,
                turning=turning_progress(now, track.turned_at),
            )
            if not track.yaws:
                track.yaws = [0.0] * len(targets)
                track.pitches = [0.0] * len(targets)

            track.yaws = [
                damp_angle(current, target.yaw, EASING_FACTOR, delta)
                for current, target in zip(track.yaws, targets)
            ]
            track.pitches = [
                damp_angle(current, target.pitch, EASING_FACTOR_FOLD, delta)
                for current, target in zip(track.pitches, targets)
            ]

            poses.append(
                PagePose(
                    state=state,
                    yaws=tuple(track.yaws),
                    pitches=tuple(track.pitches),
                    z_offset=(self.visible_page - state.physical_slot) * PAGE_DEPTH,
                    front_texture=self.textures.get(state.front_page),
                    back_texture=self.textures.get(state.back_page),
                )
            )
        return poses

    async def aclose(self) -> None:
        self._turner.cancel()
        if self.textures is not None:
            await self.textures.wait_idle()

    def _on_step(self, visible: int) -> None:
        self.request_visible_textures()

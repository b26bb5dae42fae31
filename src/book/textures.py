"""Canvas drawing for book pages.

Every page is a square "terminal style" bitmap: the cover, one card per
published profile, and the back cover. Pages outside the feed fall back to a
default layout derived from the page number alone.
"""

import asyncio
import colorsys
import io
import random
from collections.abc import Awaitable, Callable, Sequence
from functools import lru_cache
from typing import Literal, Optional, Union

import httpx
import structlog
from PIL import Image, ImageColor, ImageDraw, ImageFont, ImageOps, UnidentifiedImageError

from book.models import PageContent

logger = structlog.get_logger()

COVER: Literal["cover"] = "cover"
BACK_COVER: Literal["back"] = "back"
PageSelector = Union[int, Literal["cover", "back"]]

TEXTURE_SIZE = 1024
# Layout constants are expressed for a 1024px page and scaled.
BASE_SIZE = 1024

TERMINAL_GREEN = (0, 255, 65)
DIM_GREEN = (0, 120, 32)
HEADER_GREEN = (0, 40, 12)
GLITCH_COLORS = ((255, 0, 90), (0, 200, 255), (0, 255, 65))

PLACEHOLDER_STORIES = (
    "No story yet. This page is waiting for its first words.",
    "Connection established. Awaiting transmission...",
    "// something legendary goes here",
    "404: catchphrase not found, but the vibes are immaculate.",
    "Silence is also a message.",
)

FONT_CANDIDATES = {
    False: ("DejaVuSansMono.ttf", "LiberationMono-Regular.ttf", "cour.ttf", "Courier New.ttf"),
    True: (
        "DejaVuSansMono-Bold.ttf",
        "LiberationMono-Bold.ttf",
        "courbd.ttf",
        "Courier New Bold.ttf",
    ),
}

ImageLoader = Callable[[str], Awaitable[Optional[Image.Image]]]
Measure = Callable[[str], float]


@lru_cache(maxsize=64)
def load_font(size: int, bold: bool = False) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """First available monospace font at ``size``, else Pillow's default."""
    for name in FONT_CANDIDATES[bold]:
        try:
            return ImageFont.truetype(name, size=size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def selector_for(page_number: int, back_cover_index: int) -> PageSelector:
    """Map a logical page number to what should be drawn on it."""
    if page_number == 0:
        return COVER
    if page_number == back_cover_index:
        return BACK_COVER
    return page_number


def placeholder_story(page_number: int) -> str:
    """Stable stand-in for a blank story; the same page always gets the same one."""
    return PLACEHOLDER_STORIES[page_number % len(PLACEHOLDER_STORIES)]


def wrap_text(text: str, measure: Measure, max_width: float) -> list[str]:
    """Greedy word wrap by measured width.

    A line only exceeds ``max_width`` when it is a single word that is wider
    than ``max_width`` on its own. Explicit newlines start a new paragraph.
    """
    lines: list[str] = []
    for paragraph in text.splitlines():
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if current and measure(candidate) > max_width:
                lines.append(current)
                current = word
            else:
                current = candidate
        if current:
            lines.append(current)
    return lines


def truncate_to_width(text: str, measure: Measure, max_width: float) -> str:
    if measure(text) <= max_width:
        return text
    result = ""
    for char in text:
        if measure(result + char + "…") > max_width:
            break
        result += char
    return result.rstrip() + "…"


def _hls(hue: float, lightness: float, saturation: float) -> tuple[int, int, int]:
    r, g, b = colorsys.hls_to_rgb(hue, lightness, saturation)
    return round(r * 255), round(g * 255), round(b * 255)


def _parse_color(value: str, default: tuple[int, int, int]) -> tuple[int, int, int]:
    try:
        rgb = ImageColor.getrgb(value)
    except ValueError:
        return default
    return rgb[0], rgb[1], rgb[2]


class HttpImageLoader:
    """Downloads and decodes a remote image within a fixed timeout.

    Success and every kind of failure resolve the same awaitable: the image,
    or None.
    """

    def __init__(
        self,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    async def __call__(self, url: str) -> Optional[Image.Image]:
        try:
            return await asyncio.wait_for(self._load(url), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("image_load_timeout", url=url, timeout=self._timeout)
        except (httpx.HTTPError, UnidentifiedImageError, OSError) as e:
            logger.warning("image_load_failed", url=url, error=str(e))
        return None

    async def _load(self, url: str) -> Image.Image:
        async with httpx.AsyncClient(transport=self._transport, follow_redirects=True) as client:
            response = await client.get(url)
            response.raise_for_status()
        image = Image.open(io.BytesIO(response.content))
        image.load()
        return image.convert("RGBA")


class _Canvas:
    """Per-render drawing state: one image, one draw context, one scale."""

    def __init__(self, size: int, background: tuple[int, int, int]) -> None:
        self.size = size
        self.scale = size / BASE_SIZE
        self.image = Image.new("RGB", (size, size), background)
        self.draw = ImageDraw.Draw(self.image)

    def px(self, value: float) -> int:
        return max(1, round(value * self.scale))

    def font(self, base_size: int, bold: bool = False) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        return load_font(self.px(base_size), bold)

    def measure(self, font: ImageFont.FreeTypeFont | ImageFont.ImageFont) -> Measure:
        return lambda text: self.draw.textlength(text, font=font)

    def text_centered(
        self,
        y: float,
        text: str,
        font: ImageFont.FreeTypeFont | ImageFont.ImageFont,
        fill: tuple[int, int, int],
    ) -> None:
        self.draw.text((self.size / 2, y), text, font=font, fill=fill, anchor="mm")


class TextureGenerator:
    """Renders page bitmaps from the loaded feed.

    ``render`` only suspends while waiting on the optional avatar download,
    and each call draws on its own image, so renders can run concurrently.
    """

    def __init__(
        self,
        pages: Sequence[PageContent],
        image_loader: Optional[ImageLoader] = None,
    ) -> None:
        self._pages = list(pages)
        self._image_loader = image_loader or HttpImageLoader()

    @property
    def content_page_count(self) -> int:
        return len(self._pages)

    @property
    def back_cover_index(self) -> int:
        return len(self._pages) + 1

    async def render_page(self, page_number: int, size: int = TEXTURE_SIZE) -> Image.Image:
        """Render by logical page number (0 is the cover)."""
        return await self.render(selector_for(page_number, self.back_cover_index), size)

    async def render(self, selector: PageSelector, size: int = TEXTURE_SIZE) -> Image.Image:
        if selector == COVER or selector == 0:
            return self._draw_cover(size)
        if selector == BACK_COVER:
            return self._draw_back_cover(size)
        if isinstance(selector, int) and 1 <= selector <= len(self._pages):
            content = self._pages[selector - 1]
            avatar = await self._load_avatar(content)
            return self._draw_content_page(size, selector, content, avatar)
        return self._draw_default_page(size, int(selector))

    async def _load_avatar(self, content: PageContent) -> Optional[Image.Image]:
        if not content.avatar_url:
            return None
        try:
            return await self._image_loader(content.avatar_url)
        except Exception:
            # A broken loader must not take the page down with it.
            logger.exception("avatar_loader_error", url=content.avatar_url)
            return None

    # Layouts

    def _draw_cover(self, size: int) -> Image.Image:
        canvas = _Canvas(size, (8, 10, 8))
        rng = random.Random(0)
        _draw_noise(canvas, rng, density=0.004)
        _draw_frame(canvas)

        canvas.text_centered(canvas.px(330), "PROFILE", canvas.font(130, bold=True), TERMINAL_GREEN)
        canvas.text_centered(canvas.px(460), "WALL", canvas.font(130, bold=True), TERMINAL_GREEN)
        canvas.text_centered(canvas.px(580), "$ cat ./pages/*", canvas.font(44), DIM_GREEN)

        readout = f"TOTAL PAGES: {self.content_page_count:03d}"
        font = canvas.font(48, bold=True)
        width = canvas.draw.textlength(readout, font=font)
        box_w, box_h = width + canvas.px(60), canvas.px(90)
        x0, y0 = (size - box_w) / 2, canvas.px(700)
        canvas.draw.rectangle((x0, y0, x0 + box_w, y0 + box_h), outline=TERMINAL_GREEN, width=canvas.px(4))
        canvas.text_centered(y0 + box_h / 2, readout, font, TERMINAL_GREEN)

        _draw_glitch(canvas, rng, bands=6)
        return canvas.image

    def _draw_back_cover(self, size: int) -> Image.Image:
        canvas = _Canvas(size, (8, 10, 8))
        rng = random.Random(self.back_cover_index)
        _draw_noise(canvas, rng, density=0.003)
        _draw_frame(canvas)

        canvas.text_centered(canvas.px(360), "EOF", canvas.font(150, bold=True), TERMINAL_GREEN)
        canvas.text_centered(
            canvas.px(500), "thanks for reading", canvas.font(52), TERMINAL_GREEN
        )
        canvas.text_centered(
            canvas.px(580),
            f"{self.content_page_count} profiles on the wall",
            canvas.font(40),
            DIM_GREEN,
        )

        cx, cy, r = size / 2, canvas.px(760), canvas.px(80)
        canvas.draw.ellipse((cx - r, cy - r, cx + r, cy + r), outline=DIM_GREEN, width=canvas.px(5))
        canvas.text_centered(cy, "$ exit", canvas.font(36, bold=True), TERMINAL_GREEN)

        _draw_glitch(canvas, rng, bands=3)
        return canvas.image

    def _draw_content_page(
        self,
        size: int,
        page_number: int,
        content: PageContent,
        avatar: Optional[Image.Image],
    ) -> Image.Image:
        background = _parse_color(content.bg_color, (0, 0, 0))
        canvas = _Canvas(size, background)
        rng = random.Random(page_number)
        margin = canvas.px(60)
        max_width = size - 2 * margin

        # Header with page-number badge
        header_h = canvas.px(120)
        canvas.draw.rectangle((0, 0, size, header_h), fill=HEADER_GREEN)
        canvas.draw.text(
            (margin, header_h / 2),
            f"~/wall/page_{page_number:03d}.txt",
            font=canvas.font(40),
            fill=TERMINAL_GREEN,
            anchor="lm",
        )
        badge_r = canvas.px(42)
        bx, by = size - margin - badge_r, header_h / 2
        canvas.draw.ellipse((bx - badge_r, by - badge_r, bx + badge_r, by + badge_r), fill=TERMINAL_GREEN)
        canvas.draw.text(
            (bx, by), str(page_number), font=canvas.font(40, bold=True), fill=HEADER_GREEN, anchor="mm"
        )

        # Avatar
        avatar_r = canvas.px(110)
        cx, cy = size / 2, header_h + canvas.px(40) + avatar_r
        _draw_avatar(canvas, (cx, cy), avatar_r, avatar, content.glyph)

        # Title
        y = cy + avatar_r + canvas.px(60)
        title_font = canvas.font(56, bold=True)
        title = truncate_to_width(f"> @{content.title}", canvas.measure(title_font), max_width)
        canvas.text_centered(y, title, title_font, TERMINAL_GREEN)
        y += canvas.px(70)

        # Body
        body_font = canvas.font(38)
        line_h = canvas.px(52)
        story = content.brief_story if content.brief_story.strip() else placeholder_story(page_number)
        for line in wrap_text(story, canvas.measure(body_font), max_width):
            canvas.draw.text((margin, y), line, font=body_font, fill=TERMINAL_GREEN)
            y += line_h

        # Backlinks, one synthesized file-listing line per link
        footer_h = canvas.px(90)
        if content.backlinks:
            y += canvas.px(30)
            list_font = canvas.font(28)
            measure = canvas.measure(list_font)
            canvas.draw.text((margin, y), "$ ls -l ./links", font=list_font, fill=DIM_GREEN)
            y += canvas.px(42)
            owner = (content.title or "anon")[:8]
            for link in content.backlinks:
                if y + canvas.px(40) > size - footer_h:
                    break
                entry = f"lrwxr-xr-x 1 {owner:<8} {link.label} -> {link.url}"
                canvas.draw.text(
                    (margin, y), truncate_to_width(entry, measure, max_width), font=list_font, fill=TERMINAL_GREEN
                )
                y += canvas.px(40)

        # Footer signature
        canvas.draw.rectangle((0, size - footer_h, size, size), fill=HEADER_GREEN)
        canvas.text_centered(
            size - footer_h / 2, f"-- @{content.title} // profile wall", canvas.font(32), TERMINAL_GREEN
        )

        _draw_glitch(canvas, rng, bands=2 + page_number % 3)
        return canvas.image

    def _draw_default_page(self, size: int, page_number: int) -> Image.Image:
        hue = (page_number * 40) % 360 / 360
        accent = _hls(hue, 0.4, 0.7)
        canvas = _Canvas(size, _hls(hue, 0.95, 0.3))

        canvas.text_centered(canvas.px(200), f"Page {page_number}", canvas.font(100, bold=True), accent)
        canvas.text_centered(canvas.px(470), "Custom Page Content", canvas.font(50), accent)

        box_w, box_h = canvas.px(560), canvas.px(150)
        x0, y0 = (size - box_w) / 2, canvas.px(662)
        canvas.draw.rectangle((x0, y0, x0 + box_w, y0 + box_h), fill=accent)
        canvas.text_centered(
            y0 + box_h / 2, f"Custom content for page {page_number}", canvas.font(36), (255, 255, 255)
        )
        return canvas.image


def loading_texture(page_number: Union[int, str], size: int = TEXTURE_SIZE) -> Image.Image:
    """Cheap local stand-in shown until the real page bitmap resolves."""
    canvas = _Canvas(size, (24, 24, 24))
    canvas.draw.rectangle((0, size // 2, size, size), fill=(17, 17, 17))
    canvas.text_centered(size / 2, "Loading...", canvas.font(60, bold=True), TERMINAL_GREEN)
    canvas.text_centered(size / 2 + canvas.px(80), f"Page {page_number}", canvas.font(40), TERMINAL_GREEN)
    return canvas.image


def _draw_avatar(
    canvas: _Canvas,
    center: tuple[float, float],
    radius: int,
    avatar: Optional[Image.Image],
    glyph: str,
) -> None:
    cx, cy = center
    box = (round(cx - radius), round(cy - radius), round(cx + radius), round(cy + radius))
    diameter = box[2] - box[0]

    mask = Image.new("L", (diameter, diameter), 0)
    ImageDraw.Draw(mask).ellipse((0, 0, diameter - 1, diameter - 1), fill=255)

    if avatar is not None:
        fitted = ImageOps.fit(avatar.convert("RGB"), (diameter, diameter), Image.Resampling.LANCZOS)
        canvas.image.paste(fitted, box[:2], mask)
    else:
        tile = Image.new("RGB", (diameter, diameter), HEADER_GREEN)
        canvas.image.paste(tile, box[:2], mask)
        canvas.draw.text((cx, cy), glyph, font=canvas.font(120, bold=True), fill=TERMINAL_GREEN, anchor="mm")

    canvas.draw.ellipse(box, outline=TERMINAL_GREEN, width=canvas.px(6))


def _draw_frame(canvas: _Canvas) -> None:
    inset, corner = canvas.px(30), canvas.px(80)
    far = canvas.size - inset
    canvas.draw.rectangle((inset, inset, far, far), outline=DIM_GREEN, width=canvas.px(6))
    for x, y, dx, dy in ((inset, inset, 1, 1), (far, inset, -1, 1), (inset, far, 1, -1), (far, far, -1, -1)):
        canvas.draw.line(
            [(x, y + dy * corner), (x, y), (x + dx * corner, y)], fill=TERMINAL_GREEN, width=canvas.px(10)
        )


def _draw_noise(canvas: _Canvas, rng: random.Random, density: float) -> None:
    count = int(canvas.size * canvas.size * density)
    for _ in range(count):
        x, y = rng.randrange(canvas.size), rng.randrange(canvas.size)
        shade = rng.randint(20, 70)
        canvas.draw.point((x, y), fill=(0, shade, shade // 3))
    for y in range(0, canvas.size, canvas.px(4)):
        canvas.draw.line([(0, y), (canvas.size, y)], fill=(0, 18, 6))


def _draw_glitch(canvas: _Canvas, rng: random.Random, bands: int) -> None:
    """Shift a few horizontal slices and drop in thin colour bars."""
    size = canvas.size
    for _ in range(bands):
        height = rng.randint(canvas.px(4), canvas.px(24))
        top = rng.randrange(0, size - height)
        shift = rng.randint(-canvas.px(40), canvas.px(40))
        band = canvas.image.crop((0, top, size, top + height))
        canvas.image.paste(band, (shift, top))
        bar_y = rng.randrange(size)
        canvas.draw.line(
            [(rng.randrange(size // 2), bar_y), (rng.randrange(size // 2, size), bar_y)],
            fill=rng.choice(GLITCH_COLORS),
            width=canvas.px(2),
        )

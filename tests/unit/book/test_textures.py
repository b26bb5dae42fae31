"""Unit tests for the page texture generator."""

from typing import Optional

import pytest
from PIL import Image

from book.models import PageContent
from book.textures import (
    BACK_COVER,
    COVER,
    PLACEHOLDER_STORIES,
    TextureGenerator,
    loading_texture,
    placeholder_story,
    selector_for,
    wrap_text,
)

SIZE = 256


def measure(text: str) -> float:
    return float(len(text))


async def no_avatar(url: str) -> Optional[Image.Image]:
    return None


class TestWrapText:
    def test_lines_fit_unless_single_long_word(self):
        text = "the quick brown fox jumps over the extraordinarilylongword dog"

        lines = wrap_text(text, measure, 10)

        for line in lines:
            assert measure(line) <= 10 or " " not in line
        assert " ".join(lines) == text

    def test_newlines_start_paragraphs(self):
        assert wrap_text("one two\nthree", measure, 100) == ["one two", "three"]

    def test_empty_text(self):
        assert wrap_text("", measure, 10) == []


class TestSelectors:
    def test_maps_covers_and_content(self):
        assert selector_for(0, 3) == COVER
        assert selector_for(3, 3) == BACK_COVER
        assert selector_for(2, 3) == 2

    def test_empty_feed_back_cover_is_page_one(self):
        assert selector_for(1, 1) == BACK_COVER


class TestPlaceholderStory:
    def test_deterministic_per_page(self):
        assert placeholder_story(7) == placeholder_story(7)
        assert placeholder_story(7) == PLACEHOLDER_STORIES[7 % len(PLACEHOLDER_STORIES)]

    def test_cycles_through_all(self):
        assert {placeholder_story(n) for n in range(len(PLACEHOLDER_STORIES))} == set(
            PLACEHOLDER_STORIES
        )


class TestTextureGenerator:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [0, 1, 3])
    async def test_covers_render_for_any_feed_size(self, count: int):
        pages = [PageContent(title=f"user{n}") for n in range(count)]
        generator = TextureGenerator(pages, image_loader=no_avatar)

        cover = await generator.render(COVER, SIZE)
        back = await generator.render(BACK_COVER, SIZE)

        assert cover.size == (SIZE, SIZE)
        assert back.size == (SIZE, SIZE)

    @pytest.mark.asyncio
    async def test_content_page_is_deterministic(self):
        generator = TextureGenerator(
            [PageContent(title="alice", brief_story="")], image_loader=no_avatar
        )

        first = await generator.render_page(1, SIZE)
        second = await generator.render_page(1, SIZE)

        assert first.tobytes() == second.tobytes()

    @pytest.mark.asyncio
    async def test_render_page_routes_back_cover(self):
        generator = TextureGenerator([PageContent(title="alice")], image_loader=no_avatar)

        by_number = await generator.render_page(2, SIZE)
        by_selector = await generator.render(BACK_COVER, SIZE)

        assert by_number.tobytes() == by_selector.tobytes()

    @pytest.mark.asyncio
    async def test_avatar_image_is_drawn(self):
        red = Image.new("RGBA", (64, 64), (255, 0, 0, 255))
        requested: list[str] = []

        async def loader(url: str) -> Optional[Image.Image]:
            requested.append(url)
            return red

        page = PageContent(title="alice", avatar_url="https://cdn.test/alice.png")
        with_avatar = await TextureGenerator([page], image_loader=loader).render_page(1, SIZE)
        without = await TextureGenerator([page], image_loader=no_avatar).render_page(1, SIZE)

        assert requested == ["https://cdn.test/alice.png"]
        assert with_avatar.tobytes() != without.tobytes()

    @pytest.mark.asyncio
    async def test_failing_loader_falls_back_to_glyph(self):
        async def broken(url: str) -> Optional[Image.Image]:
            raise RuntimeError("decoder exploded")

        page = PageContent(title="alice", avatar_url="https://cdn.test/alice.png")

        image = await TextureGenerator([page], image_loader=broken).render_page(1, SIZE)
        fallback = await TextureGenerator([page], image_loader=no_avatar).render_page(1, SIZE)

        assert image.tobytes() == fallback.tobytes()

    @pytest.mark.asyncio
    async def test_page_outside_feed_uses_default_layout(self):
        generator = TextureGenerator([], image_loader=no_avatar)

        image = await generator.render(5, SIZE)

        assert image.size == (SIZE, SIZE)

    @pytest.mark.asyncio
    async def test_long_story_and_many_links_render(self):
        from domain.entities.link import Link

        page = PageContent(
            title="a" * 80,
            brief_story="word " * 200,
            backlinks=tuple(Link(label=f"l{n}", url=f"https://x.com/{n}") for n in range(30)),
        )

        image = await TextureGenerator([page], image_loader=no_avatar).render_page(1, SIZE)

        assert image.size == (SIZE, SIZE)


class TestLoadingTexture:
    def test_size(self):
        assert loading_texture(3, SIZE).size == (SIZE, SIZE)

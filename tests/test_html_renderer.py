"""Tests for HTML rendering"""
import pytest
from bs4 import BeautifulSoup

from shopsite_api.core.assembler import assemble_website_data
from shopsite_api.core.html_renderer import render_css, render_html
from shopsite_api.utils.sanitization import escape_html


def _soup(html):
    return BeautifulSoup(html, "html.parser")


class TestInlineMode:

    def test_structure(self, website_data):
        soup = _soup(render_html(website_data))

        assert soup.find("section", id="home") is not None
        assert soup.find("section", id="about-us") is not None
        assert len(soup.select("#services .service-card")) == 4
        assert soup.find("link", rel="stylesheet", href="styles.css") is not None
        assert soup.title.string.startswith("The Gentlemen's Lounge")

    def test_images_inlined(self, website_data, sample_images):
        soup = _soup(render_html(website_data))

        assert soup.select_one("#home img")["src"] == sample_images[0]
        assert soup.select_one("#about-us img")["src"] == sample_images[1]
        assert [img["src"] for img in soup.select("#gallery img")] == sample_images

    def test_empty_gallery_entries_skipped(self, shop_inputs, sample_content):
        data = assemble_website_data(shop_inputs, sample_content, ["a", "b", "c"])
        data.gallery = ["a", "", "c"]

        soup = _soup(render_html(data))

        assert [img["src"] for img in soup.select("#gallery img")] == ["a", "c"]

    def test_no_images_renders_without_img_tags(self, shop_inputs, sample_content):
        data = assemble_website_data(shop_inputs, sample_content, [])
        soup = _soup(render_html(data))

        assert soup.select("img") == []
        assert soup.find("section", id="gallery") is None

    def test_one_paragraph_per_entry(self, website_data):
        soup = _soup(render_html(website_data))
        paragraphs = [p.get_text() for p in soup.select("#about-us p")]
        assert paragraphs == [
            "Founded on old-school barbering.",
            "Every visit ends with a hot towel.",
        ]

    def test_phone_link_strips_whitespace(self, website_data):
        soup = _soup(render_html(website_data))
        tel_links = soup.select('a[href^="tel:"]')

        assert tel_links
        assert all(a["href"] == "tel:5550100" for a in tel_links)
        assert "555 0100" in soup.select_one("#contact").get_text()

    def test_brand_split(self, website_data):
        soup = _soup(render_html(website_data))
        brand = soup.select_one("header span.uppercase")
        assert brand.get_text(" ", strip=True) == "The Gentlemen's Lounge"
        assert brand.find("span").get_text() == "Gentlemen's Lounge"

    def test_service_icons(self, website_data):
        soup = _soup(render_html(website_data))
        icons = [card["data-icon"] for card in soup.select(".service-card")]
        assert icons == ["scissors", "razor", "mustache", "face"]
        assert all(card.find("svg").find() is not None for card in soup.select(".service-card"))

    def test_deterministic(self, website_data):
        assert render_html(website_data) == render_html(website_data)


class TestPlaceholderMode:

    def test_tokens_instead_of_images(self, website_data, sample_images):
        html = render_html(website_data, mode="placeholder")
        soup = _soup(html)

        assert soup.select_one("#home img")["src"] == "{{hero}}"
        assert soup.select_one("#about-us img")["src"] == "{{about}}"
        assert [img["src"] for img in soup.select("#gallery img")] == [
            "{{gallery%d}}" % i for i in range(8)
        ]
        assert all(url not in html for url in sample_images)

    def test_unknown_mode_rejected(self, website_data):
        with pytest.raises(ValueError):
            render_html(website_data, mode="pdf")


class TestEscaping:

    def test_markup_in_text_is_escaped(self, website_data):
        website_data.hero.tagline = '<script>alert("x")</script> & more'
        html = render_html(website_data)

        assert "<script>alert" not in html
        assert "&lt;script&gt;alert(&quot;x&quot;)&lt;/script&gt; &amp; more" in html

    def test_apostrophes_preserved(self, website_data):
        assert "The Gentlemen's Lounge" in render_html(website_data)

    def test_escape_disabled_renders_raw(self, website_data):
        website_data.hero.tagline = "<b>Bold</b>"
        assert "<b>Bold</b>" in render_html(website_data, escape=False)

    def test_escape_html_helper(self):
        assert escape_html('a < b & "c"') == "a &lt; b &amp; &quot;c&quot;"
        assert escape_html("") == ""


class TestRenderCss:

    def test_stylesheet_contents(self):
        css = render_css()
        assert "#header.is-scrolled" in css
        assert "Montserrat" in css

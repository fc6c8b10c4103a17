"""Tests for questlayer.services.extractor."""

from questlayer.services.extractor import extract, extract_html, extract_text
from questlayer.services.strategy import FetchResult

_BASE = "https://www.acme.xyz/"

_FULL_HTML = """
<!DOCTYPE html>
<html>
<head>
  <title>Acme Protocol | Bridges for everyone</title>
  <meta content="Move assets across chains in seconds with Acme." name="description">
  <meta property="og:description" content="OG description">
  <meta name="keywords" content="bridge, defi, layer2">
  <meta name="theme-color" content="#ff5500">
  <meta property="og:image" content="//cdn.acme.xyz/banner.png">
  <link rel="icon" href="/favicon.ico">
  <link rel="apple-touch-icon" href="/touch.png">
</head>
<body>
  <h1>Welcome to Acme</h1>
  <a href="/docs">Docs</a>
  <a href="mailto:team@acme.xyz">Mail</a>
  <a href="javascript:void(0)">Nothing</a>
  <a href="https://twitter.com/acme">Twitter</a>
  <a href="https://discord.gg/acme">Discord</a>
</body>
</html>
"""


class TestHtmlTitle:
    def test_title_is_cleaned(self):
        profile = extract_html(_FULL_HTML, _BASE)
        assert profile.title == "Acme Protocol"
        assert profile.raw_title == "Acme Protocol | Bridges for everyone"

    def test_falls_back_to_h1(self):
        profile = extract_html("<html><body><h1>Zeta Chain Labs Inc</h1></body></html>", _BASE)
        assert profile.title == "Zeta Chain Labs"

    def test_falls_back_to_hostname(self):
        profile = extract_html("<html><body><p>hi</p></body></html>", _BASE)
        assert profile.title == "acme.xyz"


class TestHtmlMeta:
    def test_meta_description_attribute_order_independent(self):
        profile = extract_html(_FULL_HTML, _BASE)
        assert profile.description == "Move assets across chains in seconds with Acme."

    def test_description_falls_back_to_og_then_twitter(self):
        og = '<html><head><meta property="og:description" content="From OG"></head></html>'
        tw = '<html><head><meta name="twitter:description" content="From Twitter"></head></html>'
        assert extract_html(og, _BASE).description == "From OG"
        assert extract_html(tw, _BASE).description == "From Twitter"

    def test_keywords_and_theme_color(self):
        profile = extract_html(_FULL_HTML, _BASE)
        assert profile.keywords == "bridge, defi, layer2"
        assert profile.theme_color == "#ff5500"

    def test_missing_meta_is_none(self):
        profile = extract_html("<html><head><title>X</title></head></html>", _BASE)
        assert profile.description is None
        assert profile.keywords is None
        assert profile.theme_color is None
        assert profile.og_image is None


class TestHtmlImages:
    def test_scheme_relative_og_image_upgraded(self):
        profile = extract_html(_FULL_HTML, _BASE)
        assert profile.og_image == "https://cdn.acme.xyz/banner.png"

    def test_twitter_image_fallback_resolved(self):
        html = '<html><head><meta name="twitter:image" content="/card.png"></head></html>'
        assert extract_html(html, _BASE).og_image == "https://www.acme.xyz/card.png"

    def test_apple_touch_icon_has_priority(self):
        profile = extract_html(_FULL_HTML, _BASE)
        assert profile.declared_icon == "https://www.acme.xyz/touch.png"
        assert profile.icon_url == "https://www.acme.xyz/touch.png"

    def test_shortcut_icon(self):
        html = '<html><head><link rel="shortcut icon" href="fav.png"></head></html>'
        assert extract_html(html, _BASE).declared_icon == "https://www.acme.xyz/fav.png"

    def test_favicon_service_fallback(self):
        profile = extract_html("<html><head><title>X</title></head></html>", _BASE)
        assert profile.declared_icon is None
        assert profile.icon_url.startswith("https://t1.gstatic.com/faviconV2")


class TestHtmlLinks:
    def test_links_are_absolute_and_filtered(self):
        profile = extract_html(_FULL_HTML, _BASE)
        assert "https://www.acme.xyz/docs" in profile.links
        assert not any(link.startswith(("mailto:", "javascript:")) for link in profile.links)

    def test_socials_detected(self):
        profile = extract_html(_FULL_HTML, _BASE)
        assert profile.social_links == {
            "twitter": "https://twitter.com/acme",
            "discord": "https://discord.gg/acme",
        }

    def test_every_url_field_is_absolute(self):
        profile = extract_html(_FULL_HTML, _BASE)
        for value in [profile.og_image, profile.icon_url, *profile.links]:
            assert value.startswith(("http://", "https://"))


_RELAY_TEXT = """Title: Acme Protocol - Bridges

URL Source: https://acme.xyz/

Markdown Content:
# Acme Protocol

Skip to main content

![Image 1: logo](https://acme.xyz/logo.png)

Acme Protocol moves assets across chains in seconds. It is secured by audited contracts!
Short one.

Follow us on [Twitter](https://x.com/acme) and https://t.me/acmechat today.

Privacy Policy | Cookie settings
"""


class TestExtractedText:
    def test_title_from_header(self):
        profile = extract_text(_RELAY_TEXT, "https://acme.xyz/")
        assert profile.title == "Acme Protocol"
        assert profile.source_kind == "extracted-text"

    def test_meta_fields_are_none(self):
        profile = extract_text(_RELAY_TEXT, "https://acme.xyz/")
        assert profile.keywords is None
        assert profile.theme_color is None
        assert profile.og_image is None
        assert profile.declared_icon is None

    def test_icon_falls_back_to_favicon_service(self):
        profile = extract_text(_RELAY_TEXT, "https://acme.xyz/")
        assert profile.icon_url.startswith("https://t1.gstatic.com/faviconV2")

    def test_socials_from_text_scan(self):
        profile = extract_text(_RELAY_TEXT, "https://acme.xyz/")
        assert profile.social_links["twitter"] == "https://x.com/acme"
        assert profile.social_links["telegram"] == "https://t.me/acmechat"

    def test_dispatch_by_source_kind(self):
        result = FetchResult(content=_RELAY_TEXT, source_kind="extracted-text")
        assert extract(result, "https://acme.xyz/").source_kind == "extracted-text"
        html_result = FetchResult(content=_FULL_HTML, source_kind="html")
        assert extract(html_result, _BASE).source_kind == "html"

import pytest

from forumlite.modules.composer.embeds import embed_markup, youtube_embed_url, youtube_video_id

VIDEO_ID = "dQw4w9WgXcQ"


@pytest.mark.parametrize(
    "url",
    [
        f"https://www.youtube.com/watch?v={VIDEO_ID}",
        f"https://youtube.com/watch?feature=share&v={VIDEO_ID}",
        f"http://m.youtube.com/watch?v={VIDEO_ID}&t=42",
        f"https://youtu.be/{VIDEO_ID}",
        f"https://youtu.be/{VIDEO_ID}?si=abc",
        f"https://www.youtube.com/embed/{VIDEO_ID}",
        f"https://www.youtube-nocookie.com/embed/{VIDEO_ID}",
        f"https://www.youtube.com/shorts/{VIDEO_ID}",
        f"https://www.youtube.com/live/{VIDEO_ID}",
        f"  https://www.youtube.com/v/{VIDEO_ID}  ",
    ],
)
def test_recognized_video_urls(url):
    assert youtube_video_id(url) == VIDEO_ID


@pytest.mark.parametrize(
    "url",
    [
        None,
        "",
        "https://www.youtube.com/",
        "https://www.youtube.com/watch?v=short",
        f"https://www.youtube.com/channel/{VIDEO_ID}",
        f"https://notyoutube.com/watch?v={VIDEO_ID}",
        f"ftp://youtu.be/{VIDEO_ID}",
        f"https://vimeo.com/{VIDEO_ID}",
    ],
)
def test_unrecognized_urls(url):
    assert youtube_video_id(url) is None


def test_embed_markup():
    url = f"https://youtu.be/{VIDEO_ID}"
    assert embed_markup(url) == f"[youtube]{url}[/youtube]"
    assert embed_markup("https://example.com") is None


def test_embed_url():
    assert youtube_embed_url(VIDEO_ID) == f"https://www.youtube.com/embed/{VIDEO_ID}"

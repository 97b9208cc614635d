from datetime import date
from unittest.mock import Mock, patch

import requests

from yaytravel.services.title_service import TitleService, fallback_title


def _response(status=200, body=None):
    resp = Mock(status_code=status, ok=200 <= status < 300, reason="Bad Gateway")
    resp.json.return_value = body
    return resp


def test_fallback_title_format():
    assert fallback_title(date(2024, 7, 5)) == "Trip Planning - 7/5/2024"


@patch("yaytravel.services.title_service.requests.post")
def test_uses_title_field(mock_post):
    mock_post.return_value = _response(body={"title": "Paris Family Trip"})
    service = TitleService(url="http://titles/generate-title")

    assert service.generate_title("family trip to paris") == "Paris Family Trip"
    mock_post.assert_called_once()
    assert mock_post.call_args.args == ("http://titles/generate-title",)
    assert mock_post.call_args.kwargs["json"] == {"text": "family trip to paris"}


@patch("yaytravel.services.title_service.requests.post")
def test_uses_generated_title_field(mock_post):
    mock_post.return_value = _response(body={"generated_title": "Tokyo Weekend"})
    assert TitleService(url="http://t").generate_title("tokyo") == "Tokyo Weekend"


@patch("yaytravel.services.title_service.requests.post")
def test_falls_back_on_http_error(mock_post):
    mock_post.return_value = _response(status=502)
    assert TitleService(url="http://t").generate_title("x") == fallback_title()


@patch("yaytravel.services.title_service.requests.post")
def test_falls_back_on_network_error(mock_post):
    mock_post.side_effect = requests.ConnectionError("down")
    assert TitleService(url="http://t").generate_title("x") == fallback_title()


@patch("yaytravel.services.title_service.requests.post")
def test_falls_back_on_empty_body(mock_post):
    mock_post.return_value = _response(body={})
    assert TitleService(url="http://t").generate_title("x") == fallback_title()

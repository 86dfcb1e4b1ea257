"""Tests for tool dispatch: routing, defaulting, error frames, end-to-end flows."""
import base64
from unittest import mock
from urllib.parse import parse_qs, urlsplit

import pytest
import requests

from assetsearch_server.core.config import FOFA, ServerConfig
from assetsearch_server.core.dispatcher import ToolDispatcher, build_dispatcher
from assetsearch_server.core.error import BackendError, DecodeError, UnknownToolError

GET = "assetsearch_server.retrievers.base.requests.get"


def _sent_params(get):
    url = get.call_args.args[0]
    return {k: v[0] for k, v in parse_qs(urlsplit(url).query).items()}


@pytest.fixture
def dispatcher(server_config) -> ToolDispatcher:
    return build_dispatcher(server_config)


def test_tools_are_registered_per_backend(dispatcher):
    assert dispatcher.tool_names == ["fofa_search", "hunter_search"]
    declared = {tool["name"]: tool for tool in dispatcher.list_tools()}
    assert declared["fofa_search"]["description"] == "FOFA搜索引擎"
    assert "fields" in declared["fofa_search"]["inputSchema"]["properties"]
    assert "is_web" in declared["hunter_search"]["inputSchema"]["properties"]


def test_only_configured_backends_are_registered(fofa_descriptor):
    dispatcher = build_dispatcher(ServerConfig(backends={FOFA: fofa_descriptor}))
    assert dispatcher.tool_names == ["fofa_search"]


def test_unknown_tool_is_rejected_without_network(dispatcher):
    with mock.patch(GET) as get:
        with pytest.raises(UnknownToolError):
            dispatcher.invoke("shodan_search", {"query": "q"})
        frame = dispatcher.handle("shodan_search", {"query": "q"})
    get.assert_not_called()
    assert frame.is_error
    assert frame.text == "Unknown tool: shodan_search"


def test_fofa_end_to_end(dispatcher, make_response):
    body = {
        "error": False,
        "mode": "extended",
        "page": 1,
        "size": 3,
        "results": [
            ["1.1.1.1", "80", "test"],
            ["2.2.2.2", "8080", "test admin"],
            ["3.3.3.3", "443", "测试"],
        ],
    }
    arguments = {"query": 'title="test"', "page": 0, "size": 0, "fields": "ip,port,title"}
    with mock.patch(GET, return_value=make_response(200, body)) as get:
        frame = dispatcher.handle("fofa_search", arguments)

    get.assert_called_once()
    params = _sent_params(get)
    assert params["page"] == "1"
    assert params["size"] == "50"
    assert params["fields"] == "ip,port,title"
    assert base64.b64decode(params["qbase64"]).decode("utf-8") == 'title="test"'

    assert not frame.is_error
    lines = frame.text.splitlines()
    assert lines[0] == "搜索结果(共3条):"
    assert lines[1:] == ["1.1.1.1 | 80 | test", "2.2.2.2 | 8080 | test admin", "3.3.3.3 | 443 | 测试"]


def test_hunter_end_to_end_defaults_to_web_assets(dispatcher, make_response):
    body = {
        "code": 200,
        "message": "success",
        "data": {
            "total": 1200,
            "time": 88,
            "arr": [
                {"ip": "1.1.1.1", "port": 443, "web_title": "登录页面"},
                {"ip": "2.2.2.2", "port": 80, "web_title": "首页"},
            ],
            "consume_quota": "消耗积分：2",
            "rest_quota": "今日剩余积分：498",
        },
    }
    with mock.patch(GET, return_value=make_response(200, body)) as get:
        frame = dispatcher.handle("hunter_search", {"query": 'web.title="登录页面"', "page": 0, "size": 0})

    params = _sent_params(get)
    assert params["is_web"] == "1"
    assert params["page_size"] == "20"
    assert "start_time" not in params and "end_time" not in params

    lines = frame.text.splitlines()
    assert lines[0] == "搜索结果(共1200条):"
    assert lines[1:] == ["IP: 1.1.1.1 | 端口: 443 | 标题: 登录页面", "IP: 2.2.2.2 | 端口: 80 | 标题: 首页"]


def test_backend_failure_becomes_error_frame(dispatcher, make_response):
    body = {"code": 40205, "message": "今日免费积分已用完"}
    with mock.patch(GET, return_value=make_response(200, body)):
        with pytest.raises(BackendError):
            dispatcher.invoke("hunter_search", {"query": "q"})
        frame = dispatcher.handle("hunter_search", {"query": "q"})

    assert frame.is_error
    assert frame.text == "今日免费积分已用完"
    assert "搜索结果" not in frame.text


def test_fofa_error_flag_becomes_error_frame(dispatcher, make_response):
    body = {"error": True, "errmsg": "[-700] Account Invalid"}
    with mock.patch(GET, return_value=make_response(200, body)):
        frame = dispatcher.handle("fofa_search", {"query": "q", "page": 1, "size": 10})
    assert frame.is_error
    assert frame.text == "[-700] Account Invalid"


def test_malformed_body_is_not_a_backend_error(dispatcher, make_response):
    with mock.patch(GET, return_value=make_response(200, raw=b"not json")):
        with pytest.raises(DecodeError) as exc_info:
            dispatcher.invoke("fofa_search", {"query": "q"})
        frame = dispatcher.handle("fofa_search", {"query": "q"})
    assert not isinstance(exc_info.value, BackendError)
    assert frame.is_error
    assert "malformed" in frame.text


def test_transport_failure_becomes_error_frame(dispatcher):
    with mock.patch(GET, side_effect=requests.exceptions.ConnectionError("connection refused")) as get:
        frame = dispatcher.handle("hunter_search", {"query": "q"})
    get.assert_called_once()
    assert frame.is_error
    assert "connection refused" in frame.text


def test_invalid_arguments_fail_before_any_request(dispatcher):
    with mock.patch(GET) as get:
        frame = dispatcher.handle("hunter_search", {"query": "q", "start_time": "yesterday"})
    get.assert_not_called()
    assert frame.is_error
    assert "YYYY-MM-DD" in frame.text


def test_unexpected_errors_propagate(dispatcher):
    with mock.patch(GET, side_effect=RuntimeError("boom")):
        with pytest.raises(RuntimeError):
            dispatcher.handle("fofa_search", {"query": "q"})

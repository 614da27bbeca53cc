from tool_router.models import MatchMethod, RoutableTool, RouteResult, Tool


def test_tool_keywords_become_tuple():
    tool = Tool("weather", "Get weather", ["rain", "sun"])
    assert tool.keywords == ("rain", "sun")
    assert isinstance(tool, RoutableTool)


def test_tool_from_dict():
    tool = Tool.from_dict({"name": "fetch", "description": "Fetch web pages", "keywords": "url, web ,"})
    assert tool == Tool("fetch", "Fetch web pages", ("url", "web"))
    assert Tool.from_dict({"name": "bare"}).keywords == ()


def test_skip_result():
    result = RouteResult.skip()
    assert result.tools == []
    assert result.should_skip
    assert result.confidence == 1.0
    assert result.method is MatchMethod.SKIPPED
    assert result.tool_names == []


def test_match_method_values():
    assert [m.value for m in MatchMethod] == ["keyword", "semantic", "skipped", "fallback"]
    assert MatchMethod("fallback") is MatchMethod.FALLBACK

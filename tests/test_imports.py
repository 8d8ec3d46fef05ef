def test_import_storygraph_package() -> None:
    import importlib

    module = importlib.import_module("storygraph")
    assert module.__version__


def test_service_exports() -> None:
    from storygraph.services import PlaythroughService, build_story_layout

    assert callable(build_story_layout)
    assert PlaythroughService.__name__ == "PlaythroughService"

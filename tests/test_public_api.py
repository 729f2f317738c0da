from __future__ import annotations


def test_public_api_exports() -> None:
    import spherewalk as sw

    assert hasattr(sw, "generate_path")
    assert hasattr(sw, "render")
    assert hasattr(sw, "render_scene")
    assert hasattr(sw, "CameraParameters")
    assert hasattr(sw, "AccumulationBuffer")
    assert hasattr(sw, "DegenerateMathError")

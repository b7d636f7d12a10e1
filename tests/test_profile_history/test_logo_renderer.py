"""Tests for logo rendering."""

from unittest.mock import patch

import numpy as np
import pytest

from src.profile_history.data_models import ProfileMatrix
from src.profile_history.errors import RenderError
from src.profile_history.logo_renderer import LogoRenderer, counts_frame

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class TestCountsFrame:
    """Test counts_frame."""

    def test_positions_by_nucleotides(self, matrix_factory):
        frame = counts_frame(matrix_factory("MA0001.1"))

        assert list(frame.columns) == ["A", "C", "G", "T"]
        assert frame.shape == (10, 4)
        assert frame.loc[0, "C"] == 94


class TestLogoRenderer:
    """Test LogoRenderer."""

    def test_render_png(self, matrix_factory, tmp_path):
        path = tmp_path / "logos" / "MA0001.1.png"

        result = LogoRenderer().render(matrix_factory("MA0001.1"), path, 120, 75)

        assert result == path
        assert path.read_bytes().startswith(PNG_SIGNATURE)

    def test_empty_matrix(self, tmp_path):
        matrix = ProfileMatrix("MA0001.1", "MA0001", 1, "AGL3", np.zeros((4, 0)))

        with pytest.raises(RenderError, match="no positions"):
            LogoRenderer().render(matrix, tmp_path / "x.png", 120, 75)

    def test_invalid_size(self, matrix_factory, tmp_path):
        with pytest.raises(RenderError, match="invalid logo size"):
            LogoRenderer().render(matrix_factory("MA0001.1"), tmp_path / "x.png", 0, 75)

    def test_drawing_failure_wrapped(self, matrix_factory, tmp_path):
        with patch(
            "src.profile_history.logo_renderer.logomaker.Logo",
            side_effect=ValueError("bad matrix"),
        ):
            with pytest.raises(RenderError) as exc_info:
                LogoRenderer().render(
                    matrix_factory("MA0001.1"), tmp_path / "x.png", 120, 75
                )

        assert exc_info.value.matrix_id == "MA0001.1"
        assert exc_info.value.reason == "bad matrix"
        assert exc_info.value.base_id == "MA0001"
        assert exc_info.value.release is None
        assert not (tmp_path / "x.png").exists()


class TestRenderError:
    """Test RenderError identifiers."""

    def test_release_in_message(self):
        error = RenderError("MA0001.1", "out/MA0001.1.png", "boom", base_id="MA0001")
        assert str(error) == "Could not draw logo for MA0001.1 to out/MA0001.1.png: boom"

        error.release = "2016"

        assert str(error) == (
            "Could not draw logo for MA0001.1 in release 2016 "
            "to out/MA0001.1.png: boom"
        )
        assert error.base_id == "MA0001"

"""
Sequence logo rendering with logomaker.
"""

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import logomaker  # noqa: E402
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402

from ..shared_utilities import get_logger  # noqa: E402
from .data_models import NUCLEOTIDES, ProfileMatrix  # noqa: E402
from .errors import RenderError  # noqa: E402

logger = get_logger(__name__)

MAX_INFORMATION = 2.0  # bits, for a four letter alphabet


def counts_frame(matrix: ProfileMatrix) -> pd.DataFrame:
    """Counts as a positions x nucleotides frame, the layout logomaker expects."""
    return pd.DataFrame(matrix.content.T, columns=list(NUCLEOTIDES))


class LogoRenderer:
    """Draws information-content logos of position frequency matrices."""

    def __init__(self, color_scheme: str = "classic", dpi: int = 100):
        """Initialize renderer.

        Args:
            color_scheme: logomaker color scheme name
            dpi: Resolution used to turn pixel sizes into figure inches
        """
        self.color_scheme = color_scheme
        self.dpi = dpi

    def render(
        self, matrix: ProfileMatrix, path: str | Path, xsize: int, ysize: int
    ) -> Path:
        """Draw the logo of ``matrix`` to a PNG of ``xsize`` x ``ysize`` pixels.

        Raises:
            RenderError: The matrix is empty or drawing/saving failed
        """
        path = Path(path)
        if matrix.length == 0:
            raise RenderError(
                matrix.matrix_id,
                str(path),
                "matrix has no positions",
                base_id=matrix.base_id,
            )
        if xsize <= 0 or ysize <= 0:
            raise RenderError(
                matrix.matrix_id,
                str(path),
                f"invalid logo size {xsize}x{ysize}",
                base_id=matrix.base_id,
            )

        fig, ax = plt.subplots(figsize=(xsize / self.dpi, ysize / self.dpi))
        try:
            info = logomaker.transform_matrix(
                counts_frame(matrix), from_type="counts", to_type="information"
            )
            logomaker.Logo(info, ax=ax, color_scheme=self.color_scheme)
            ax.set_ylim(0, MAX_INFORMATION)
            ax.axis("off")
            fig.subplots_adjust(left=0, right=1, top=1, bottom=0)

            path.parent.mkdir(parents=True, exist_ok=True)
            fig.savefig(path, dpi=self.dpi)
        except Exception as e:
            raise RenderError(
                matrix.matrix_id, str(path), str(e), base_id=matrix.base_id
            ) from e
        finally:
            plt.close(fig)

        logger.debug("Drew logo {path}", path=str(path), matrix_id=matrix.matrix_id)
        return path

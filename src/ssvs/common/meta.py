from __future__ import annotations

import sys


def library_versions() -> dict[str, str]:
    import numpy
    import pandas
    import scipy
    import sklearn
    import tqdm

    return {
        "python": sys.version.split()[0],
        "numpy": numpy.__version__,
        "pandas": pandas.__version__,
        "sklearn": sklearn.__version__,
        "scipy": scipy.__version__,
        "tqdm": tqdm.__version__,
    }

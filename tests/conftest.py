import matplotlib

matplotlib.use("Agg")

import pytest


@pytest.fixture()
def table_path(tmp_path):
    """Comma separated table with a header row and four labelled rows."""
    path = tmp_path / "table.csv"
    path.write_text(
        ",c1,c2,c3\n"
        "a,1.0,2.0,3.0\n"
        "b,4.0,5.0,6.0\n"
        "c,0.5,0.5,0.5\n"
        "d,-1.0,0.0,1.0\n"
    )
    return str(path)

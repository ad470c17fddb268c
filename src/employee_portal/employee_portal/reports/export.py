from __future__ import annotations

import io
from typing import Any, Dict, List

import pandas as pd

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def rows_to_xlsx(rows: List[Dict[str, Any]], *, sheet_name: str = "Report") -> io.BytesIO:
    """Write report rows to an in-memory Excel workbook, ready for ``send_file``."""
    df = pd.DataFrame(rows)
    df.columns = [str(c).replace("_", " ").title() for c in df.columns]

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name[:31])
    output.seek(0)
    return output

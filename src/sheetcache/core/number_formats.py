from __future__ import annotations

from types import MappingProxyType

GENERAL_FORMAT_ID = 0
GENERAL_FORMAT_CODE = "General"

# ECMA-376 Part 1, 18.8.30. Ids 5-8, 23-36 and 41-44 are locale dependent
# and are always written into styles.xml when used.
BUILTIN_NUMBER_FORMATS = MappingProxyType(
    {
        0: GENERAL_FORMAT_CODE,
        1: "0",
        2: "0.00",
        3: "#,##0",
        4: "#,##0.00",
        9: "0%",
        10: "0.00%",
        11: "0.00E+00",
        12: "# ?/?",
        13: "# ??/??",
        14: "mm-dd-yy",
        15: "d-mmm-yy",
        16: "d-mmm",
        17: "mmm-yy",
        18: "h:mm AM/PM",
        19: "h:mm:ss AM/PM",
        20: "h:mm",
        21: "h:mm:ss",
        22: "m/d/yy h:mm",
        37: "#,##0 ;(#,##0)",
        38: "#,##0 ;[Red](#,##0)",
        39: "#,##0.00;(#,##0.00)",
        40: "#,##0.00;[Red](#,##0.00)",
        45: "mm:ss",
        46: "[h]:mm:ss",
        47: "mmss.0",
        48: "##0.0E+0",
        49: "@",
    }
)

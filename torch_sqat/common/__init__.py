"""Building blocks: scales, interpolation & FIR design, a0 curves.

Diagnostic plots live in :mod:`torch_sqat.common.plotting` and are not imported here.
"""

from torch_sqat.common.scales import from_db, to_db, hz2bark, bark2hz, ZWICKER_BARK_TABLE
from torch_sqat.common.filters import torch_interp1, torch_firwin2, create_a0_fir
from torch_sqat.common.ears import (A0_TABLES,
                                    A0_FLOW,
                                    A0_FHIGH,
                                    DEFAULT_A0_TYPE,
                                    A0TransmissionCurve,
                                    a0_frequency_grid,
                                    a0_gain_vector,
                                    calculate_a0,
                                    get_a0_table,
                                    interpolate_a0)

__all__ = ["from_db",
           "to_db",
           "hz2bark",
           "bark2hz",
           "ZWICKER_BARK_TABLE",
           "torch_interp1",
           "torch_firwin2",
           "create_a0_fir",
           "A0_TABLES",
           "A0_FLOW",
           "A0_FHIGH",
           "DEFAULT_A0_TYPE",
           "A0TransmissionCurve",
           "a0_frequency_grid",
           "a0_gain_vector",
           "calculate_a0",
           "get_a0_table",
           "interpolate_a0",
           ]

import matplotlib

matplotlib.use("Agg")

import pytest

from compartments.dismod import DisModModel
from compartments.parameters import DisModParameters, SIRParameters
from compartments.sir import SIRModel


@pytest.fixture
def sir_params():
    return SIRParameters(incidence_rate=0.02, removal_rate=0.03, recovery_rate=0.04,
                         i_init=0.01, r_init=0.0)


@pytest.fixture
def dismod_params():
    return DisModParameters(iota=0.01, rho=0.02, chi=0.03, omega=0.04, c_init=0.01)


@pytest.fixture
def sir_model(sir_params):
    return SIRModel(sir_params, length=10)


@pytest.fixture
def dismod_model(dismod_params):
    return DisModModel(dismod_params, length=10)

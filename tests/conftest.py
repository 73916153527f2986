import pytest

import fgcodegen as fg


# every test starts with the default settings
@pytest.fixture(autouse=True)
def default_rcparams():
    with fg.rc_context():
        fg.rcdefaults()
        yield

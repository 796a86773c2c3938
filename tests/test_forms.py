from werkzeug.datastructures import MultiDict

from common.forms import get_bool
from common.io import secure_filename


def test_get_bool_handles_various_types():
    assert get_bool({}, "flag", default=True) is True
    assert get_bool({"flag": "on"}, "flag", default=False) is True
    assert get_bool({"flag": "OFF"}, "flag", default=True) is False
    assert get_bool({"flag": 0}, "flag", default=True) is False
    assert get_bool({"flag": "  "}, "flag", default=True) is True


def test_get_bool_reads_form_multidict():
    form = MultiDict([("strict", "yes")])
    assert get_bool(form, "strict") is True
    assert get_bool(None, "strict", default=True) is True


def test_secure_filename():
    assert secure_filename("../../etc/structure.xyz") == "etc_structure.xyz"
    assert secure_filename("", fallback="structure") == "structure"

import pytest

from accessrules.file_adapter import AdapterError, FileAdapter, Filter, FilteredFileAdapter
from accessrules.model import Model

POLICY_TEXT = (
    "p, alice, data1, read\n"
    "p, bob, data2, write\n"
    "p, data2_admin, data2, read\n"
    "p, data2_admin, data2, write\n"
    "\n"
    "# a comment\n"
    "g, alice, data2_admin\n"
)


def new_model():
    m = Model()
    m.add_def("r", "r", "sub, obj, act")
    m.add_def("p", "p", "sub, obj, act")
    m.add_def("g", "g", "_, _")
    return m


@pytest.fixture
def policy_file(tmp_path):
    path = tmp_path / "policy.csv"
    path.write_text(POLICY_TEXT, encoding="utf-8")
    return path


def test_load_policy(policy_file):
    m = new_model()
    FileAdapter(policy_file).load_policy(m)
    assert m.get_policy("p", "p") == [
        ["alice", "data1", "read"],
        ["bob", "data2", "write"],
        ["data2_admin", "data2", "read"],
        ["data2_admin", "data2", "write"],
    ]
    assert m.get_policy("g", "g") == [["alice", "data2_admin"]]


def test_save_policy_format(tmp_path):
    m = new_model()
    m.add_policy("p", "p", ["alice", "data1", "read"])
    m.add_policy("g", "g", ["alice", "data2_admin"])
    path = tmp_path / "out.csv"
    FileAdapter(path).save_policy(m)
    assert path.read_text(encoding="utf-8") == "p, alice, data1, read\ng, alice, data2_admin"


def test_save_then_load_round_trip(policy_file, tmp_path):
    original = new_model()
    FileAdapter(policy_file).load_policy(original)
    target = tmp_path / "copy.csv"
    FileAdapter(target).save_policy(original)
    reloaded = new_model()
    FileAdapter(target).load_policy(reloaded)
    assert reloaded.get_policy("p", "p") == original.get_policy("p", "p")
    assert reloaded.get_policy("g", "g") == original.get_policy("g", "g")


def test_empty_path_is_rejected():
    with pytest.raises(AdapterError, match="file path cannot be empty"):
        FileAdapter("").load_policy(new_model())
    with pytest.raises(AdapterError, match="file path cannot be empty"):
        FileAdapter("").save_policy(new_model())


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        FileAdapter(tmp_path / "absent.csv").load_policy(new_model())


@pytest.mark.parametrize(
    "call",
    [
        lambda a: a.add_policy("p", "p", ["alice", "data1", "read"]),
        lambda a: a.add_policies("p", "p", [["alice", "data1", "read"]]),
        lambda a: a.remove_policy("p", "p", ["alice", "data1", "read"]),
        lambda a: a.remove_policies("p", "p", [["alice", "data1", "read"]]),
        lambda a: a.remove_filtered_policy("p", "p", 0, "alice"),
        lambda a: a.update_policy("p", "p", ["a"], ["b"]),
        lambda a: a.update_policies("p", "p", [["a"]], [["b"]]),
    ],
)
def test_auto_save_operations_raise(policy_file, call):
    with pytest.raises(AdapterError):
        call(FileAdapter(policy_file))


def test_filtered_adapter_starts_filtered(policy_file):
    adapter = FilteredFileAdapter(policy_file)
    assert adapter.is_filtered() is True
    with pytest.raises(AdapterError, match="cannot save a filtered policy"):
        adapter.save_policy(new_model())


def test_filtered_adapter_full_load_can_be_saved(policy_file, tmp_path):
    adapter = FilteredFileAdapter(policy_file)
    m = new_model()
    adapter.load_policy(m)
    assert adapter.is_filtered() is False
    assert len(m.get_policy("p", "p")) == 4
    adapter.file_path = str(tmp_path / "saved.csv")
    adapter.save_policy(m)
    reloaded = new_model()
    FileAdapter(adapter.file_path).load_policy(reloaded)
    assert reloaded.get_policy("p", "p") == m.get_policy("p", "p")


def test_load_filtered_policy(policy_file):
    adapter = FilteredFileAdapter(policy_file)
    m = new_model()
    adapter.load_filtered_policy(m, Filter(p=["", "data2"], g=["alice"]))
    assert adapter.is_filtered() is True
    assert m.get_policy("p", "p") == [
        ["bob", "data2", "write"],
        ["data2_admin", "data2", "read"],
        ["data2_admin", "data2", "write"],
    ]
    assert m.get_policy("g", "g") == [["alice", "data2_admin"]]


def test_filter_excluding_grouping(policy_file):
    m = new_model()
    FilteredFileAdapter(policy_file).load_filtered_policy(m, Filter(p=["alice"], g=["bob"]))
    assert m.get_policy("p", "p") == [["alice", "data1", "read"]]
    assert m.get_policy("g", "g") == []


def test_filter_longer_than_line_skips_it(policy_file):
    m = new_model()
    FilteredFileAdapter(policy_file).load_filtered_policy(m, Filter(g=["", "", ""]))
    assert m.get_policy("g", "g") == []
    assert len(m.get_policy("p", "p")) == 4


def test_none_filter_loads_everything(policy_file):
    adapter = FilteredFileAdapter(policy_file)
    m = new_model()
    adapter.load_filtered_policy(m, None)
    assert adapter.is_filtered() is False
    assert len(m.get_policy("p", "p")) == 4


def test_invalid_filter_type(policy_file):
    with pytest.raises(AdapterError, match="invalid filter type"):
        FilteredFileAdapter(policy_file).load_filtered_policy(new_model(), {"p": ["alice"]})


def test_filtered_empty_path():
    with pytest.raises(AdapterError, match="file path cannot be empty"):
        FilteredFileAdapter("").load_filtered_policy(new_model(), Filter())
from utils.mentions import extract_handles, local_part


def test_extract_handles_unique_lowercase():
    assert extract_handles("@Alice please sync with @bob.smith and @alice") == ["alice", "bob.smith"]


def test_extract_handles_requires_boundary():
    assert extract_handles("mail me at someone@acme.co") == []
    assert extract_handles("(cc @ops) done") == ["ops"]


def test_extract_handles_empty():
    assert extract_handles("") == []
    assert extract_handles(None) == []


def test_local_part():
    assert local_part("Jane.Doe@Acme.co") == "jane.doe"
    assert local_part(None) == ""

import pytest

from broker.startup_profile import StartupProfile, validate_broker_profile


def test_valid_profile_passes():
    validate_broker_profile(StartupProfile(role="BROKER", host="0.0.0.0", port=8080), "file", "./data")


@pytest.mark.parametrize(
    "host,port,persistence,data_dir",
    [
        ("", 8080, "file", "./data"),
        ("0.0.0.0", 0, "file", "./data"),
        ("0.0.0.0", 70000, "sql", "./data"),
        ("0.0.0.0", 8080, "redis", "./data"),
        ("0.0.0.0", 8080, "file", " "),
    ],
)
def test_invalid_profile_rejected(host, port, persistence, data_dir):
    with pytest.raises(ValueError):
        validate_broker_profile(StartupProfile(role="BROKER", host=host, port=port), persistence, data_dir)


def test_all_problems_reported_together():
    with pytest.raises(ValueError) as excinfo:
        validate_broker_profile(StartupProfile(role="BROKER", host="", port=0), "redis", "")

    message = str(excinfo.value)
    assert "host is required" in message
    assert "1..65535" in message
    assert "persistence" in message
    assert "data_dir" in message

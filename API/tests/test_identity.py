from container_health.services.identity import (
    extract_client,
    extract_identity,
    extract_session_id,
)


def test_client_is_capitalized_subdomain_of_first_url():
    lines = [
        "booting",
        "webhook registered at https://acme.example.com/api/webhook",
        "forwarding to http://other.example.com",
    ]
    assert extract_client(lines) == "Acme"


def test_client_defaults_to_unknown():
    assert extract_client(["no urls here", "localhost:3000 ready"]) == "Unknown"
    assert extract_client([]) == "Unknown"


def test_client_ignores_hosts_without_a_dot():
    assert extract_client(["http://localhost:3000/health", "https://beta.example.org"]) == "Beta"


def test_session_id_first_match_wins():
    lines = [
        "received message { chatId: '5511999990000@c.us', body: 'hi' }",
        "received message { chatId: '5511888880000@c.us', body: 'yo' }",
    ]
    assert extract_session_id(lines) == "5511999990000"


def test_session_id_absent():
    assert extract_session_id(["chatId: 'abc@c.us'", "nothing"]) is None


def test_extract_identity_accepts_a_generator():
    identity = extract_identity(
        line for line in ["https://tenant.example.com", "chatId: '42@c.us'"]
    )
    assert identity.client == "Tenant"
    assert identity.session_id == "42"

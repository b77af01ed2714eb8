def normalize_action_payload(payload) -> dict:
    """
    Accepts a few common client shapes and converts them into the canonical
    action body expected by ActionRequest:

    {"type": "SET_ROLE", "role": "buyer"}

    - "action" is accepted as an alias of "type"; type names are upper-cased
    - snake_case deal_size is mapped to dealSize
    - a bare string body is treated as a payload-less action ("REQUEST_ADVANCE")
    """
    if payload is None:
        payload = {}
    if isinstance(payload, str):
        payload = {"type": payload}
    if not isinstance(payload, dict):
        return {}

    data = dict(payload)
    if "type" not in data and "action" in data:
        data["type"] = data.pop("action")
    if isinstance(data.get("type"), str):
        data["type"] = data["type"].strip().upper()

    if "dealSize" not in data and "deal_size" in data:
        data["dealSize"] = data.pop("deal_size")

    # Roles travel lowercase, tiers uppercase
    if isinstance(data.get("role"), str):
        data["role"] = data["role"].strip().lower()
    if isinstance(data.get("tier"), str):
        data["tier"] = data["tier"].strip().upper()

    return data

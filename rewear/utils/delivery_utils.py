import re


# Placeholders written when contact data is missing at delivery creation
UNASSIGNED = "미정"
PLACEHOLDER_PHONE = "010-0000-0000"
PLACEHOLDER_ADDRESS = "주소 미정"
EMPTY_ADDRESS_MARKERS = ("", "주소 미입력")

# Carrier/tracking values that still mean "not assigned yet"
UNASSIGNED_MARKERS = frozenset({UNASSIGNED, "unassigned"})


carrier_code_and_name = {
    "01": "우체국택배",
    "04": "CJ대한통운",
    "05": "한진택배",
    "06": "로젠택배",
    "08": "롯데택배",
    "11": "일양로지스",
    "16": "한의사랑택배",
    "17": "천일택배",
    "18": "건영택배",
    "20": "한덱스",
    "22": "대신택배",
    "23": "경동택배",
    "24": "GS Postbox 택배",
    "32": "합동택배",
    "40": "굿투럭",
    "43": "애니트랙",
    "44": "SLX택배",
    "45": "우리택배(구호남택배)",
    "46": "CU 편의점택배",
    "47": "우리한방택배",
    "53": "농협택배",
    "54": "홈픽택배",
    "999": "직접배송",
}


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def is_unassigned(value: str | None) -> bool:
    """
    True when carrier or tracking number carries no real value,
    including the placeholder markers written by earlier flows.
    """
    return is_blank(value) or value.strip() in UNASSIGNED_MARKERS  # type: ignore


def resolve_carrier(carrier: str | None) -> str | None:
    """
    Carrier codes ("04") are stored as carrier names ("CJ대한통운").
    Anything else is kept as given.
    """
    if is_blank(carrier):
        return None
    carrier = carrier.strip()  # type: ignore
    return carrier_code_and_name.get(carrier, carrier)


def format_phone(phone: str | None) -> str | None:
    """
    Renormalise a phone number to dashed form.
    11 digits -> 3-4-4, 10 digits -> 3-3-4, otherwise the raw value is kept.
    """
    if is_blank(phone):
        return phone
    digits = re.sub(r"\D", "", phone)  # type: ignore
    match len(digits):
        case 11:
            return f"{digits[:3]}-{digits[3:7]}-{digits[7:]}"
        case 10:
            return f"{digits[:3]}-{digits[3:6]}-{digits[6:]}"
        case _:
            return phone


def is_empty_address(address: str | None) -> bool:
    return address is None or address.strip() in EMPTY_ADDRESS_MARKERS

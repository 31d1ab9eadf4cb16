import pytest

from identity.address.address import Address
from ordering.cart.cart import Cart
from ordering.location.location import Location


@pytest.fixture(autouse=True)
def run_around_tests():
    """Push the ordering domain context before each test, pop it after."""
    from ordering.domain import ordering

    ctx = ordering.domain_context()
    ctx.push()

    yield

    ctx.pop()


@pytest.fixture()
def cart_payload():
    return {
        "cartId": "cart-1",
        "items": [
            {
                "id": "it-1",
                "itemType": "product",
                "productId": "p-1",
                "quantity": 2,
                "product": {"id": "p-1", "name": "Mechanical Keyboard", "price": "50.00", "imageUrl": "kb.png"},
            },
            {
                "id": "it-2",
                "itemType": "bundle",
                "bundleId": "b-1",
                "quantity": 1,
                "bundle": {"id": "b-1", "name": "Desk Setup", "price": "100.00"},
                "product": {"id": "stray", "name": "Should be ignored", "price": "1.00"},
            },
        ],
        "totals": {"subtotal": "200.00", "itemCount": 3, "shipping": "12.00", "tax": "30.00", "total": "242.00"},
    }


@pytest.fixture()
def address_rows():
    return [
        {
            "id": "a-1",
            "recipientName": "Mona Ali Hassan",
            "streetAddress": "12 Abbas El Akkad St",
            "city": "Cairo",
            "district": "Nasr City",
            "postalCode": "11765",
            "phoneNumber": "+201000000000",
            "label": "Home",
            "isDefault": True,
        },
        {
            "id": "a-2",
            "recipientName": "Mona Hassan",
            "streetAddress": "5 Fouad St",
            "city": "Alexandria",
            "district": "Raml",
            "postalCode": "21511",
            "phoneNumber": "+201000000001",
            "label": "Work",
            "isDefault": False,
        },
    ]


@pytest.fixture()
def location_rows():
    return [
        {"id": "loc-1", "name": "Nasr City", "city": "Cairo", "taxRate": "0.14", "shippingRate": "0.05", "active": True},
        {"id": "loc-2", "name": "Smouha", "city": "Alexandria", "taxRate": "0.14", "shippingRate": "0.08", "active": True},
        {"id": "loc-3", "name": "Maadi", "city": "Cairo", "taxRate": "0.14", "shippingRate": "0.06", "active": True},
        {"id": "loc-9", "name": "Closed Zone", "city": "Giza", "taxRate": "0.10", "shippingRate": "0.10", "active": False},
    ]


@pytest.fixture()
def cart(cart_payload):
    return Cart.from_payload(cart_payload)


@pytest.fixture()
def addresses(address_rows):
    return [Address.from_payload(row) for row in address_rows]


@pytest.fixture()
def locations(location_rows):
    return [Location.from_payload(row) for row in location_rows if row["active"]]


@pytest.fixture()
def shop(backend, cart_payload, address_rows, location_rows):
    """Backend primed with everything a checkout needs."""
    backend.respond("GET", "/cart", cart_payload)
    backend.respond("GET", "/addresses", {"addresses": address_rows})
    backend.respond("GET", "/locations", location_rows)
    backend.respond("GET", "/cart/validate", {"valid": True, "message": "Cart is valid"})
    return backend

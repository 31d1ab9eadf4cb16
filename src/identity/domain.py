"""Identity bounded context: accounts and their address books."""

from protean.domain import Domain

identity = Domain(name="identity")

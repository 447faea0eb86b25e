"""Identity service - label-driven account state and level engine."""

"""Pure domain layer: value objects, DTOs, clock and payout boundaries."""

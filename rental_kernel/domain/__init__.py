"""Pure domain layer: clock, accounts, parameters, rules and DTOs."""

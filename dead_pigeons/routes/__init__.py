"""HTTP blueprints (controllers). No business logic here."""

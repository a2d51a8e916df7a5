"""HTTP surface: request helpers and versioned blueprints."""

"""Remote function executed behind the API gateway."""

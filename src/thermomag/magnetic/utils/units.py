R_J_PER_MOL_K = 8.314462618  # J·mol^-1·K^-1
def assert_unit(actual: str, expected: str, what: str):
    if actual != expected:
        raise ValueError(f"Unit mismatch for {what}: got '{actual}', expected '{expected}'")

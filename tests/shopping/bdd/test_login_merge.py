"""BDD tests for merging a guest cart into the account cart at login."""

from pytest_bdd import parsers, scenarios, then, when

from shopping.cart.management import MergeOnLogin

scenarios("features/cart_merge.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the shopper logs in", target_fixture="login")
def shopper_logs_in(process):
    return process(MergeOnLogin(account_id="cust-001", session_token="sess-guest-0001"))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{product_id}" is reported as {outcome}'))
def reported_as(login, product_id, outcome):
    assert login.merged
    assert product_id in getattr(login.result, outcome)

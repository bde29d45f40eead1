class AppStatusCode:
    # success
    DATA_RETRIEVED_SUCCESSFULLY = "100"
    OPERATION_SUCCESSFUL = "101"
    CREATED_SUCCESSFULLY = "102"
    UPDATED_SUCCESSFULLY = "103"
    DELETED_SUCCESSFULLY = "104"

    # generic failures
    OPERATION_FAILED = "200"
    OPERATION_ERROR = "201"
    INVALID_INPUT = "202"
    NOT_FOUND = "203"

    # authentication
    AUTHENTICATION_TOKEN_INVALID = "300"
    AUTHENTICATION_TOKEN_EXPIRED = "301"

    # lease engine
    LEASE_INTERVAL_UNAVAILABLE = "400"
    LEASE_INVALID_CADENCE = "401"
    LEASE_ILLEGAL_TRANSITION = "402"
    LEASE_INVALID_DATE_RANGE = "403"

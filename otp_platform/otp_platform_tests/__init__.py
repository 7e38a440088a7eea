"""
otp_platform_tests package

Tests for the OTP auth service:

- OTP login, signup, verification and resend flows (`test_auth.py`, `test_otp_verification.py`)
- Social login (`test_social_login.py`)
- Session gate and user lookup (`test_users.py`)
- Challenge store, email sender, event logger, database setup and seeding
"""

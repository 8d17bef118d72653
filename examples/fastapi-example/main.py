"""Example app using gsi-verify for "Sign In With Google".

The sign-in button posts the user's ID token to ``/login`` as the
``credential`` form field. The app verifies it against Google's published
keys and answers with the signed-in user's profile.

Run:  GOOGLE_CLIENT_ID=<id>.apps.googleusercontent.com uvicorn main:app --reload
"""

from fastapi import Depends, FastAPI

from gsi_verify import GoogleSignIn, GoogleSignInConfig, UserProfile

# ---------------------------------------------------------------------------
# Setup: client id(s) from GOOGLE_CLIENT_ID, keys from Google's certs endpoint
# ---------------------------------------------------------------------------

gsi = GoogleSignIn.from_config(GoogleSignInConfig.from_env(), cookie_name="gsi_credential")

app = FastAPI(title="gsi-verify Example")


# ---------------------------------------------------------------------------
# Login URI for the sign-in button (data-login_uri)
# ---------------------------------------------------------------------------


@app.post("/login")
async def login(user: UserProfile = Depends(gsi.current_user)):
    """Google posts the credential here after the user picks an account."""
    return {"message": f"Signed in as {user.email}", "user": user.as_dict()}


# ---------------------------------------------------------------------------
# API routes: send the credential as a Bearer token or in the cookie
# ---------------------------------------------------------------------------


@app.get("/me")
async def me(user: UserProfile = Depends(gsi.current_user)):
    return user.as_dict()


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)

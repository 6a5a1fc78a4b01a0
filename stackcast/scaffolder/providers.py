"""Authentication provider registry.

A closed catalog of the authentication systems stackcast can scaffold. The
catalog is built once at import time and never mutated; string ids are only
converted to :class:`AuthProviderId` at the boundary via :func:`lookup`.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field

FALLBACK_BUCKET = "all"

SessionStrategy = Literal["jwt", "database", "both"]


class AuthProviderId(str, Enum):
    AUTHJS = "auth.js"
    BETTER_AUTH = "better-auth"
    CLERK = "clerk"
    AUTH0 = "auth0"
    PASSPORT = "passport.js"
    SUPABASE = "supabase-auth"
    FIREBASE = "firebase-auth"


class StackProvider(BaseModel):
    """Static metadata for one pluggable provider."""

    model_config = ConfigDict(frozen=True)

    id: AuthProviderId
    name: str
    packages: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    dev_packages: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    env_variables: tuple[str, ...] = ()
    requires_database: bool = False
    supported_frameworks: tuple[str, ...] = ()
    session_strategy: SessionStrategy = "jwt"
    server_side: bool = Field(
        default=False,
        description="Provider config lives in the API app when the project has one",
    )
    template_dir: str = ""
    docs_url: str = ""

    def packages_for(self, framework: str) -> list[str]:
        """Runtime packages for *framework*, falling back to the ``all`` bucket."""
        return list(self.packages.get(framework) or self.packages.get(FALLBACK_BUCKET) or ())

    def dev_packages_for(self, framework: str) -> list[str]:
        """Dev packages for *framework*, falling back to the ``all`` bucket."""
        return list(
            self.dev_packages.get(framework) or self.dev_packages.get(FALLBACK_BUCKET) or ()
        )

    def supports(self, framework: str) -> bool:
        return framework in self.supported_frameworks

    @property
    def template_path(self) -> str:
        """Template directory relative to the template root."""
        return f"auth/{self.template_dir or self.id.value}"


_PG_BACKEND = ("@auth/core", "@auth/pg-adapter", "pg", "bcryptjs")
_PG_BACKEND_TYPES = ("@types/pg", "@types/bcryptjs")

_CATALOG: tuple[StackProvider, ...] = (
    StackProvider(
        id=AuthProviderId.AUTHJS,
        name="Auth.js (NextAuth.js v5)",
        packages={
            "next": ("next-auth@beta", "@auth/prisma-adapter"),
            "react": ("@auth/core", "@auth/prisma-adapter"),
            "remix": ("@auth/core", "@auth/remix", "@auth/prisma-adapter"),
            "solid": ("@auth/core", "@auth/solid-start", "@auth/prisma-adapter"),
            "svelte": ("@auth/core", "@auth/sveltekit", "@auth/prisma-adapter"),
            "express": _PG_BACKEND,
            "hono": _PG_BACKEND,
            "fastify": _PG_BACKEND,
        },
        dev_packages={
            "all": ("@types/node",),
            "express": _PG_BACKEND_TYPES,
            "hono": _PG_BACKEND_TYPES,
            "fastify": _PG_BACKEND_TYPES,
        },
        env_variables=(
            "AUTH_SECRET",
            "AUTH_URL",
            "AUTH_TRUST_HOST",
            "DATABASE_URL",
            "GITHUB_ID",
            "GITHUB_SECRET",
            "GOOGLE_CLIENT_ID",
            "GOOGLE_CLIENT_SECRET",
        ),
        requires_database=True,
        supported_frameworks=(
            "next",
            "react",
            "remix",
            "solid",
            "svelte",
            "express",
            "hono",
            "fastify",
            "tanstack-router",
            "tanstack-start",
            "react-router",
            "vite",
        ),
        session_strategy="both",
        server_side=True,
        template_dir="authjs",
        docs_url="https://authjs.dev",
    ),
    StackProvider(
        id=AuthProviderId.BETTER_AUTH,
        name="Better Auth",
        packages={"all": ("better-auth",)},
        env_variables=(
            "BETTER_AUTH_SECRET",
            "BETTER_AUTH_URL",
            "DATABASE_URL",
            "GITHUB_CLIENT_ID",
            "GITHUB_CLIENT_SECRET",
            "GOOGLE_CLIENT_ID",
            "GOOGLE_CLIENT_SECRET",
        ),
        requires_database=True,
        supported_frameworks=("next", "react", "vue", "nuxt", "remix", "solid", "svelte", "astro"),
        session_strategy="both",
        server_side=True,
        template_dir="better-auth",
        docs_url="https://better-auth.com",
    ),
    StackProvider(
        id=AuthProviderId.CLERK,
        name="Clerk",
        packages={
            "next": ("@clerk/nextjs",),
            "react": ("@clerk/clerk-react",),
            "remix": ("@clerk/remix",),
            "express": ("@clerk/express",),
        },
        env_variables=(
            "NEXT_PUBLIC_CLERK_PUBLISHABLE_KEY",
            "CLERK_SECRET_KEY",
            "NEXT_PUBLIC_CLERK_SIGN_IN_URL",
            "NEXT_PUBLIC_CLERK_SIGN_UP_URL",
            "NEXT_PUBLIC_CLERK_AFTER_SIGN_IN_URL",
            "NEXT_PUBLIC_CLERK_AFTER_SIGN_UP_URL",
        ),
        supported_frameworks=("next", "react", "remix"),
        template_dir="clerk",
        docs_url="https://clerk.com/docs",
    ),
    StackProvider(
        id=AuthProviderId.AUTH0,
        name="Auth0",
        packages={
            "next": ("@auth0/nextjs-auth0",),
            "react": ("@auth0/auth0-react",),
            "vue": ("@auth0/auth0-vue",),
            "angular": ("@auth0/auth0-angular",),
            "express": ("express-openid-connect",),
        },
        env_variables=(
            "AUTH0_SECRET",
            "AUTH0_BASE_URL",
            "AUTH0_ISSUER_BASE_URL",
            "AUTH0_CLIENT_ID",
            "AUTH0_CLIENT_SECRET",
            "AUTH0_AUDIENCE",
            "AUTH0_SCOPE",
        ),
        supported_frameworks=("next", "react", "vue", "angular", "express"),
        template_dir="auth0",
        docs_url="https://auth0.com/docs",
    ),
    StackProvider(
        id=AuthProviderId.PASSPORT,
        name="Passport.js",
        packages={
            "express": (
                "passport",
                "passport-local",
                "passport-jwt",
                "express-session",
                "connect-mongo",
                "bcryptjs",
                "jsonwebtoken",
            ),
            "node": (
                "passport",
                "passport-local",
                "passport-jwt",
                "express-session",
                "bcryptjs",
                "jsonwebtoken",
            ),
            "fastify": (
                "@fastify/passport",
                "@fastify/secure-session",
                "passport-local",
                "passport-jwt",
            ),
        },
        dev_packages={
            "all": (
                "@types/passport",
                "@types/passport-local",
                "@types/passport-jwt",
                "@types/bcryptjs",
            ),
        },
        env_variables=(
            "JWT_SECRET",
            "JWT_EXPIRES_IN",
            "SESSION_SECRET",
            "DATABASE_URL",
            "GOOGLE_CLIENT_ID",
            "GOOGLE_CLIENT_SECRET",
            "GITHUB_CLIENT_ID",
            "GITHUB_CLIENT_SECRET",
        ),
        requires_database=True,
        supported_frameworks=("express", "node", "fastify"),
        template_dir="passport",
        docs_url="https://www.passportjs.org/docs",
    ),
    StackProvider(
        id=AuthProviderId.SUPABASE,
        name="Supabase Auth",
        packages={
            "all": (
                "@supabase/supabase-js",
                "@supabase/auth-helpers-react",
                "@supabase/auth-helpers-nextjs",
            ),
        },
        env_variables=(
            "NEXT_PUBLIC_SUPABASE_URL",
            "NEXT_PUBLIC_SUPABASE_ANON_KEY",
            "SUPABASE_SERVICE_KEY",
        ),
        supported_frameworks=("next", "react", "vue", "nuxt", "remix", "solid", "svelte"),
        template_dir="supabase",
        docs_url="https://supabase.com/docs/guides/auth",
    ),
    StackProvider(
        id=AuthProviderId.FIREBASE,
        name="Firebase Auth",
        packages={"all": ("firebase", "firebase-admin")},
        env_variables=(
            "FIREBASE_API_KEY",
            "FIREBASE_AUTH_DOMAIN",
            "FIREBASE_PROJECT_ID",
            "FIREBASE_STORAGE_BUCKET",
            "FIREBASE_MESSAGING_SENDER_ID",
            "FIREBASE_APP_ID",
        ),
        supported_frameworks=("next", "react", "vue", "angular", "nuxt", "remix"),
        template_dir="firebase",
        docs_url="https://firebase.google.com/docs/auth",
    ),
)

AUTH_PROVIDERS: Mapping[AuthProviderId, StackProvider] = MappingProxyType(
    {provider.id: provider for provider in _CATALOG}
)


def lookup(provider_id: str | AuthProviderId) -> StackProvider | None:
    """Return the provider registered under *provider_id*, or ``None``."""
    try:
        key = AuthProviderId(provider_id)
    except ValueError:
        return None
    return AUTH_PROVIDERS[key]


def available_providers() -> list[str]:
    """Registered provider ids in declaration order."""
    return [provider.id.value for provider in _CATALOG]

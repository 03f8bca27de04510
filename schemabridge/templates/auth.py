# File: schemabridge/templates/auth.py
"""
Schema Bridge - Authentication Subsystem Renderer
==================================================
The four authentication artifacts emitted when ``authentication`` is on:

    AuthService        registration, login, email verification, password
                       reset, token verification and profile lookup
    AuthController     Express handlers delegating to the service
    auth.middleware    ``authenticate`` bearer-token guard
    auth.routes        the six ``/api/auth/*`` endpoints

The service works against the canonical ``User`` model built by
``schemabridge.auth.build_auth_model``.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from schemabridge.models import AUTH_MODEL_NAME
from schemabridge.templates.common import (
    AUTH_CONTROLLER_PATH,
    AUTH_MIDDLEWARE_PATH,
    AUTH_ROUTES_PATH,
    AUTH_SERVICE_PATH,
    GENERATED_BANNER,
    JWT_SECRET_EXPR,
    VALIDATION_MIDDLEWARE_PATH,
    async_handler,
    import_path,
    join_lines,
)
from schemabridge.utils import variable_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemabridge.templates.auth")

# Prisma accessor of the auth model (``prisma.user``).
_USERS: str = f"this.prisma.{variable_name(AUTH_MODEL_NAME)}"


def render_auth_service() -> str:
    lines: List[str] = [
        GENERATED_BANNER,
        "import crypto from 'crypto';",
        "import bcrypt from 'bcryptjs';",
        "import jwt from 'jsonwebtoken';",
        "import { PrismaClient } from '@prisma/client';",
        "",
        f"const JWT_SECRET = {JWT_SECRET_EXPR};",
        "const JWT_EXPIRES_IN = process.env.JWT_EXPIRES_IN || '7d';",
        "const SALT_ROUNDS = 10;",
        "const RESET_TOKEN_TTL_MS = 60 * 60 * 1000;",
        "",
        "const profileSelect = {",
        "  id: true,",
        "  email: true,",
        "  name: true,",
        "  emailVerified: true,",
        "  createdAt: true,",
        "  updatedAt: true,",
        "} as const;",
        "",
        "export interface TokenPayload {",
        "  userId: string;",
        "  email: string;",
        "}",
        "",
        "/**",
        " * Failure raised by the auth service; statusCode is honoured by the error middleware.",
        " */",
        "export class AuthError extends Error {",
        "  constructor(message: string, public readonly statusCode: number = 400) {",
        "    super(message);",
        "    Object.setPrototypeOf(this, AuthError.prototype);",
        "  }",
        "}",
        "",
        "export class AuthService {",
        "  constructor(private readonly prisma: PrismaClient) {}",
        "",
        "  async register(email: string, password: string, name: string) {",
        f"    const existing = await {_USERS}.findUnique({{ where: {{ email }} }});",
        "    if (existing) {",
        "      throw new AuthError('Email already registered', 409);",
        "    }",
        "",
        "    const verificationToken = crypto.randomBytes(32).toString('hex');",
        f"    const user = await {_USERS}.create({{",
        "      data: {",
        "        email,",
        "        name,",
        "        password: await bcrypt.hash(password, SALT_ROUNDS),",
        "        verificationToken,",
        "      },",
        "      select: profileSelect,",
        "    });",
        "    return { user, verificationToken };",
        "  }",
        "",
        "  async login(email: string, password: string) {",
        f"    const user = await {_USERS}.findUnique({{ where: {{ email }} }});",
        "    if (!user || !(await bcrypt.compare(password, user.password))) {",
        "      throw new AuthError('Invalid credentials', 401);",
        "    }",
        "",
        "    const token = this.signToken({ userId: user.id, email: user.email });",
        "    return {",
        "      token,",
        "      user: { id: user.id, email: user.email, name: user.name, emailVerified: user.emailVerified },",
        "    };",
        "  }",
        "",
        "  async verifyEmail(token: string): Promise<void> {",
        f"    const user = await {_USERS}.findFirst({{ where: {{ verificationToken: token }} }});",
        "    if (!user) {",
        "      throw new AuthError('Invalid verification token');",
        "    }",
        f"    await {_USERS}.update({{",
        "      where: { id: user.id },",
        "      data: { emailVerified: true, verificationToken: null },",
        "    });",
        "  }",
        "",
        "  /**",
        "   * Stores a reset token and returns it, or null when the email is unknown.",
        "   */",
        "  async forgotPassword(email: string): Promise<string | null> {",
        f"    const user = await {_USERS}.findUnique({{ where: {{ email }} }});",
        "    if (!user) {",
        "      return null;",
        "    }",
        "",
        "    const resetToken = crypto.randomBytes(32).toString('hex');",
        f"    await {_USERS}.update({{",
        "      where: { id: user.id },",
        "      data: {",
        "        resetPasswordToken: resetToken,",
        "        resetPasswordExpires: new Date(Date.now() + RESET_TOKEN_TTL_MS),",
        "      },",
        "    });",
        "    return resetToken;",
        "  }",
        "",
        "  async resetPassword(token: string, password: string): Promise<void> {",
        f"    const user = await {_USERS}.findFirst({{",
        "      where: { resetPasswordToken: token, resetPasswordExpires: { gt: new Date() } },",
        "    });",
        "    if (!user) {",
        "      throw new AuthError('Invalid or expired reset token');",
        "    }",
        f"    await {_USERS}.update({{",
        "      where: { id: user.id },",
        "      data: {",
        "        password: await bcrypt.hash(password, SALT_ROUNDS),",
        "        resetPasswordToken: null,",
        "        resetPasswordExpires: null,",
        "      },",
        "    });",
        "  }",
        "",
        "  verifyToken(token: string): TokenPayload {",
        "    try {",
        "      return jwt.verify(token, JWT_SECRET) as TokenPayload;",
        "    } catch (error) {",
        "      throw new AuthError('Invalid or expired token', 401);",
        "    }",
        "  }",
        "",
        "  async getProfile(userId: string) {",
        f"    const user = await {_USERS}.findUnique({{ where: {{ id: userId }}, select: profileSelect }});",
        "    if (!user) {",
        "      throw new AuthError('User not found', 404);",
        "    }",
        "    return user;",
        "  }",
        "",
        "  private signToken(payload: TokenPayload): string {",
        "    return jwt.sign(payload, JWT_SECRET, { expiresIn: JWT_EXPIRES_IN } as jwt.SignOptions);",
        "  }",
        "}",
    ]
    return join_lines(lines)


def render_auth_middleware() -> str:
    path: str = AUTH_MIDDLEWARE_PATH
    lines: List[str] = [
        GENERATED_BANNER,
        "import { Request, Response, NextFunction } from 'express';",
        "import jwt from 'jsonwebtoken';",
        f"import {{ TokenPayload }} from '{import_path(path, AUTH_SERVICE_PATH)}';",
        "",
        "export interface AuthenticatedRequest extends Request {",
        "  user?: TokenPayload;",
        "}",
        "",
        "/**",
        " * Rejects requests without a valid bearer token and exposes its payload as req.user.",
        " */",
        "export const authenticate = (req: Request, res: Response, next: NextFunction): void => {",
        "  const header = req.headers.authorization;",
        "  if (!header || !header.startsWith('Bearer ')) {",
        "    res.status(401).json({ error: 'Authentication required' });",
        "    return;",
        "  }",
        "",
        "  try {",
        f"    const payload = jwt.verify(header.slice(7), {JWT_SECRET_EXPR}) as TokenPayload;",
        "    (req as AuthenticatedRequest).user = payload;",
        "    next();",
        "  } catch (error) {",
        "    res.status(401).json({ error: 'Invalid or expired token' });",
        "  }",
        "};",
    ]
    return join_lines(lines)


def render_auth_controller() -> str:
    path: str = AUTH_CONTROLLER_PATH
    lines: List[str] = [
        GENERATED_BANNER,
        "import { Request, Response, NextFunction } from 'express';",
        f"import {{ AuthService }} from '{import_path(path, AUTH_SERVICE_PATH)}';",
        f"import {{ AuthenticatedRequest }} from '{import_path(path, AUTH_MIDDLEWARE_PATH)}';",
        "",
        "export class AuthController {",
        "  constructor(private readonly authService: AuthService) {}",
        "",
    ]
    lines.extend(async_handler("register", [
        "const { email, password, name } = req.body;",
        "const { user } = await this.authService.register(email, password, name);",
        "res.status(201).json({ message: 'Registration successful. Please verify your email.', user });",
    ]))
    lines.append("")
    lines.extend(async_handler("login", [
        "const { email, password } = req.body;",
        "res.json(await this.authService.login(email, password));",
    ]))
    lines.append("")
    lines.extend(async_handler("verifyEmail", [
        "await this.authService.verifyEmail(String(req.query.token ?? ''));",
        "res.json({ message: 'Email verified successfully' });",
    ]))
    lines.append("")
    lines.extend(async_handler("forgotPassword", [
        "await this.authService.forgotPassword(req.body.email);",
        "res.json({ message: 'If the email exists, a reset link has been sent' });",
    ]))
    lines.append("")
    lines.extend(async_handler("resetPassword", [
        "const { token, password } = req.body;",
        "await this.authService.resetPassword(token, password);",
        "res.json({ message: 'Password reset successfully' });",
    ]))
    lines.append("")
    lines.extend(async_handler("profile", [
        "const userId = (req as AuthenticatedRequest).user?.userId;",
        "if (!userId) {",
        "  res.status(401).json({ error: 'Authentication required' });",
        "  return;",
        "}",
        "res.json(await this.authService.getProfile(userId));",
    ]))
    lines.append("}")
    return join_lines(lines)


def render_auth_routes() -> str:
    path: str = AUTH_ROUTES_PATH
    lines: List[str] = [
        GENERATED_BANNER,
        "import { Router } from 'express';",
        "import { z } from 'zod';",
        f"import {{ AuthController }} from '{import_path(path, AUTH_CONTROLLER_PATH)}';",
        f"import {{ authenticate }} from '{import_path(path, AUTH_MIDDLEWARE_PATH)}';",
        f"import {{ validateBody }} from '{import_path(path, VALIDATION_MIDDLEWARE_PATH)}';",
        "",
        "const RegisterSchema = z.object({",
        "  email: z.string().email(),",
        "  password: z.string().min(8),",
        "  name: z.string().min(1),",
        "});",
        "",
        "const LoginSchema = z.object({",
        "  email: z.string().email(),",
        "  password: z.string().min(1),",
        "});",
        "",
        "const ForgotPasswordSchema = z.object({",
        "  email: z.string().email(),",
        "});",
        "",
        "const ResetPasswordSchema = z.object({",
        "  token: z.string().min(1),",
        "  password: z.string().min(8),",
        "});",
        "",
        "export function createAuthRoutes(controller: AuthController): Router {",
        "  const router = Router();",
        "",
        "  router.post('/register', validateBody(RegisterSchema), controller.register);",
        "  router.post('/login', validateBody(LoginSchema), controller.login);",
        "  router.get('/verify-email', controller.verifyEmail);",
        "  router.post('/forgot-password', validateBody(ForgotPasswordSchema), controller.forgotPassword);",
        "  router.post('/reset-password', validateBody(ResetPasswordSchema), controller.resetPassword);",
        "  router.get('/profile', authenticate, controller.profile);",
        "",
        "  return router;",
        "}",
    ]
    return join_lines(lines)


def render_auth_system() -> Dict[str, str]:
    """The four authentication artifacts, keyed by path."""
    files: Dict[str, str] = {
        AUTH_SERVICE_PATH: render_auth_service(),
        AUTH_CONTROLLER_PATH: render_auth_controller(),
        AUTH_MIDDLEWARE_PATH: render_auth_middleware(),
        AUTH_ROUTES_PATH: render_auth_routes(),
    }
    logger.debug("Rendered authentication subsystem.")
    return files


__all__: List[str] = [
    "render_auth_service",
    "render_auth_middleware",
    "render_auth_controller",
    "render_auth_routes",
    "render_auth_system",
]

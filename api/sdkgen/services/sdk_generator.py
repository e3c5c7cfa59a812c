from __future__ import annotations
import json
import re
from typing import Any, Dict, List, Tuple
from sdkgen.models.schemas import (
    AnalysisResult,
    Endpoint,
    GeneratedFile,
    GeneratedSDK,
    ProviderType,
)
from sdkgen.obs.decorators import traced
from sdkgen.obs.logging_setup import get_logger
from sdkgen.services.heuristics import sample_endpoints

logger = get_logger(__name__)

SDK_VERSION = "1.0.0"
SDK_SCOPE = "@sdkgen"

# (class name, file stem, client property, interfaces module)
_SERVICE_LAYOUT: Dict[ProviderType, Tuple[str, str, str, str]] = {
    ProviderType.PAYMENT: ("CheckoutService", "checkout", "Checkout", "payment"),
    ProviderType.SHIPPING: ("ShippingService", "shipping", "Shipping", "shipping"),
    ProviderType.MESSAGING: ("MessagingService", "messaging", "Messaging", "messaging"),
    ProviderType.UNKNOWN: ("ApiService", "api", "Api", "api"),
}

_BODY_METHODS = {"POST", "PUT", "PATCH"}
_PATH_PARAM = re.compile(r"\{(\w+)\}")


def normalize_provider_name(name: str) -> str:
    normalized = re.sub(r"[^a-z0-9-]", "-", name.lower())
    normalized = re.sub(r"-+", "-", normalized).strip("-")
    return normalized or "provider"


def method_name(purpose: str) -> str:
    """camelCase identifier for an endpoint purpose ("create_payment" -> "createPayment")."""
    words = [w for w in re.split(r"[^A-Za-z0-9]+", purpose) if w]
    if not words:
        return "request"
    name = words[0].lower() + "".join(w[:1].upper() + w[1:].lower() for w in words[1:])
    return name if not name[0].isdigit() else f"op{name}"


INDEX_TS = """export { ClientSDK } from './client-sdk';
export { setAppConfig, getAppConfig } from './config/app-config';
export { authenticate } from './services/auth.service';
export * from './interfaces';
"""

APP_CONFIG_TS = """export interface AppConfig {
  env: 'development' | 'staging' | 'production';
  debug: boolean;
  userAgent: string;
  timeout?: number;
  baseUrl?: string;
}

let appConfig: AppConfig = {
  env: 'production',
  debug: false,
  userAgent: 'SDKGen-SDK/1.0.0'
};

export function setAppConfig(config: Partial<AppConfig>): void {
  appConfig = { ...appConfig, ...config };
}

export function getAppConfig(): AppConfig {
  return { ...appConfig };
}
"""

HTTP_SERVICE_TS = """import axios, { AxiosInstance, AxiosRequestConfig } from 'axios';
import { getAppConfig } from '../config/app-config';
import { createError } from './error';
import { logger } from './logger';

export class HttpService {
  private client: AxiosInstance;

  constructor(private token: string) {
    const config = getAppConfig();
    this.client = axios.create({
      baseURL: config.baseUrl,
      timeout: config.timeout || 30000,
      headers: {
        'User-Agent': config.userAgent,
        'Content-Type': 'application/json'
      }
    });

    this.client.interceptors.request.use((request) => {
      request.headers = request.headers || {};
      __AUTH_HEADER__
      if (config.debug) {
        logger.debug({ method: request.method, url: request.url }, 'HTTP request');
      }
      return request;
    });
  }

  private async request<T>(config: AxiosRequestConfig): Promise<T> {
    try {
      const response = await this.client.request<T>(config);
      return response.data;
    } catch (error: any) {
      const status = error?.response?.status;
      throw createError(error?.message || 'Request failed', 'HTTP_ERROR', status);
    }
  }

  get<T>(url: string, config?: AxiosRequestConfig): Promise<T> {
    return this.request<T>({ ...config, method: 'GET', url });
  }

  post<T>(url: string, data?: unknown, config?: AxiosRequestConfig): Promise<T> {
    return this.request<T>({ ...config, method: 'POST', url, data });
  }

  put<T>(url: string, data?: unknown, config?: AxiosRequestConfig): Promise<T> {
    return this.request<T>({ ...config, method: 'PUT', url, data });
  }

  patch<T>(url: string, data?: unknown, config?: AxiosRequestConfig): Promise<T> {
    return this.request<T>({ ...config, method: 'PATCH', url, data });
  }

  delete<T>(url: string, config?: AxiosRequestConfig): Promise<T> {
    return this.request<T>({ ...config, method: 'DELETE', url });
  }
}
"""

LOGGER_TS = """import pino from 'pino';

export const logger = pino({
  transport: {
    target: 'pino-pretty',
    options: {
      colorize: true,
      translateTime: 'SYS:dd-mm-yyyy HH:MM:ss',
      ignore: 'pid,hostname'
    }
  },
  level: process.env.LOG_LEVEL || 'info'
});
"""

ERROR_TS = """export class SDKError extends Error {
  constructor(
    message: string,
    public code?: string,
    public statusCode?: number
  ) {
    super(message);
    this.name = 'SDKError';
  }
}

export function createError(message: string, code?: string, statusCode?: number): SDKError {
  return new SDKError(message, code, statusCode);
}
"""

JEST_CONFIG_CJS = """module.exports = {
  preset: 'ts-jest',
  testEnvironment: 'node',
  roots: ['<rootDir>/src', '<rootDir>/__tests__'],
  testMatch: ['**/__tests__/**/*.test.ts'],
  collectCoverageFrom: [
    'src/**/*.ts',
    '!src/**/*.d.ts',
    '!src/index.ts'
  ],
  coverageDirectory: 'coverage',
  coverageReporters: ['text', 'lcov', 'html']
};
"""

TSCONFIG = {
    "compilerOptions": {
        "target": "ES2022",
        "module": "commonjs",
        "lib": ["ES2022"],
        "outDir": "./dist",
        "rootDir": "./src",
        "strict": True,
        "esModuleInterop": True,
        "skipLibCheck": True,
        "forceConsistentCasingInFileNames": True,
        "resolveJsonModule": True,
        "declaration": True,
        "sourceMap": True,
        "moduleResolution": "node",
    },
    "include": ["src/**/*"],
    "exclude": ["node_modules", "dist", "__tests__"],
}

INTERFACES_TS: Dict[str, str] = {
    "payment": """export interface CreatePaymentDTO {
  amount: number;
  currency: string;
  description?: string;
  customerId?: string;
  metadata?: Record<string, any>;
}

export interface PaymentData {
  id: string;
  status: 'pending' | 'completed' | 'failed' | 'cancelled';
  amount: number;
  currency: string;
  description?: string;
  paymentUrl?: string;
  createdAt: string;
  updatedAt?: string;
}
""",
    "shipping": """export interface Address {
  street: string;
  city: string;
  state: string;
  postalCode: string;
  country: string;
}

export interface Package {
  weight: number;
  dimensions: { length: number; width: number; height: number };
  description?: string;
}

export interface CreateShipmentDTO {
  origin: Address;
  destination: Address;
  package: Package;
  serviceType?: string;
}

export interface ShipmentData {
  id: string;
  status: 'created' | 'in_transit' | 'delivered' | 'cancelled';
  trackingNumber: string;
  estimatedDelivery?: string;
  createdAt: string;
}
""",
    "messaging": """export interface SendMessageDTO {
  to: string;
  body: string;
  template?: string;
  channel?: 'email' | 'sms' | 'push';
}

export interface MessageData {
  id: string;
  status: 'queued' | 'sent' | 'delivered' | 'failed';
  to: string;
  createdAt: string;
}
""",
    "api": """export interface ResourceData {
  id: string;
  [key: string]: any;
}
""",
}

BASE_INTERFACES_TS = """export interface APIResponse<T = any> {
  success: boolean;
  data?: T;
  error?: {
    code: string;
    message: string;
  };
}
"""


def _http_auth_line(analysis: AnalysisResult) -> str:
    auth = analysis.authentication
    name = _ts_string(auth.parameter_name or "Authorization")
    if auth.location == "query":
        return f"request.params = {{ ...(request.params || {{}}), '{name}': this.token }};"
    if auth.type.value in ("bearer", "oauth") or name.lower() == "authorization":
        return f"request.headers['{name}'] = `Bearer ${{this.token}}`;"
    return f"request.headers['{name}'] = this.token;"


def _ts_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'").replace("`", "\\`")


def _ts_path(path: str) -> str:
    return _PATH_PARAM.sub(lambda m: "${" + m.group(1) + "}", _ts_string(path))


def _service_method(endpoint: Endpoint, name: str) -> str:
    path_params = _PATH_PARAM.findall(endpoint.path)
    args = [f"{param}: string" for param in path_params]
    verb = endpoint.method.upper()
    call_args = [f"`{_ts_path(endpoint.path)}`"]
    if verb in _BODY_METHODS:
        args.append("data: Record<string, any>")
        call_args.append("data")
    http_verb = verb.lower() if verb in {"GET", "POST", "PUT", "PATCH", "DELETE"} else "get"
    purpose = _ts_string(endpoint.purpose)

    return (
        f"  async {name}({', '.join(args)}): Promise<any> {{\n"
        f"    try {{\n"
        f"      logger.info('{purpose}: {verb} {_ts_string(endpoint.path)}');\n"
        f"      return await this.httpService.{http_verb}<any>({', '.join(call_args)});\n"
        f"    }} catch (error) {{\n"
        f"      logger.error(error, 'Failed to {purpose}');\n"
        f"      throw error;\n"
        f"    }}\n"
        f"  }}"
    )


def _service_endpoints(analysis: AnalysisResult) -> List[Endpoint]:
    return list(analysis.endpoints) or sample_endpoints(analysis.provider_type)


def _service_file(analysis: AnalysisResult) -> GeneratedFile:
    class_name, stem, _, _ = _SERVICE_LAYOUT[analysis.provider_type]

    methods = []
    used = set()
    for endpoint in _service_endpoints(analysis):
        name = method_name(endpoint.purpose)
        base, n = name, 2
        while name in used:
            name = f"{base}{n}"
            n += 1
        used.add(name)
        methods.append(_service_method(endpoint, name))

    content = (
        "import { HttpService } from '../utils/httpService';\n"
        "import { logger } from '../utils/logger';\n\n"
        f"export class {class_name} {{\n"
        "  private httpService: HttpService;\n\n"
        "  constructor(token: string) {\n"
        "    this.httpService = new HttpService(token);\n"
        "  }\n"
        + ("\n" + "\n\n".join(methods) + "\n" if methods else "")
        + "}\n"
    )
    return GeneratedFile(path=f"src/services/{stem}.service.ts", content=content, type="typescript")


def _client_file(analysis: AnalysisResult) -> GeneratedFile:
    class_name, stem, prop, _ = _SERVICE_LAYOUT[analysis.provider_type]
    content = (
        f"import {{ {class_name} }} from './services/{stem}.service';\n\n"
        "export class ClientSDK {\n"
        f"  public readonly {prop}: {class_name};\n\n"
        "  constructor(private token: string) {\n"
        "    if (!token) {\n"
        "      throw new Error('Authentication token is required');\n"
        "    }\n"
        f"    this.{prop} = new {class_name}(token);\n"
        "  }\n"
        "}\n"
    )
    return GeneratedFile(path="src/client-sdk.ts", content=content, type="typescript")


def _auth_file(analysis: AnalysisResult) -> GeneratedFile:
    auth = analysis.authentication
    content = (
        "import { logger } from '../utils/logger';\n\n"
        f"// Detected authentication: {auth.type.value}"
        f" ({auth.location or 'header'}, {auth.parameter_name or 'Authorization'})\n"
        "export async function authenticate(apiKey: string, apiSecret?: string): Promise<string> {\n"
        "  if (!apiKey) {\n"
        "    throw new Error('API key is required');\n"
        "  }\n"
        "  logger.info('Authentication successful');\n"
        "  return apiSecret ? `${apiKey}:${apiSecret}` : apiKey;\n"
        "}\n"
    )
    return GeneratedFile(path="src/services/auth.service.ts", content=content, type="typescript")


def _interfaces_files(analysis: AnalysisResult) -> List[GeneratedFile]:
    module = _SERVICE_LAYOUT[analysis.provider_type][3]
    index = f"export * from './{module}.interfaces';\n\n" + BASE_INTERFACES_TS
    return [
        GeneratedFile(path=f"src/interfaces/{module}.interfaces.ts", content=INTERFACES_TS[module], type="typescript"),
        GeneratedFile(path="src/interfaces/index.ts", content=index, type="typescript"),
    ]


def _test_file(analysis: AnalysisResult) -> GeneratedFile:
    prop = _SERVICE_LAYOUT[analysis.provider_type][2]
    content = (
        "import { ClientSDK } from '../src/client-sdk';\n\n"
        "describe('ClientSDK', () => {\n"
        "  it('should create instance with valid token', () => {\n"
        "    const sdk = new ClientSDK('test-token-123');\n"
        f"    expect(sdk.{prop}).toBeDefined();\n"
        "  });\n\n"
        "  it('should throw error with empty token', () => {\n"
        "    expect(() => new ClientSDK('')).toThrow('Authentication token is required');\n"
        "  });\n"
        "});\n"
    )
    return GeneratedFile(path="__tests__/client-sdk.test.ts", content=content, type="typescript")


def build_manifest(normalized_name: str, provider_name: str) -> Dict[str, Any]:
    return {
        "name": f"{SDK_SCOPE}/{normalized_name}-sdk",
        "version": SDK_VERSION,
        "description": f"Generated SDK for {provider_name} integration",
        "main": "dist/index.js",
        "types": "dist/index.d.ts",
        "scripts": {
            "build": "tsc",
            "test": "jest",
            "test:coverage": "jest --coverage",
            "lint": "eslint src --ext .ts",
        },
        "dependencies": {"axios": "^1.6.0", "pino": "^8.0.0"},
        "devDependencies": {
            "@types/jest": "^29.0.0",
            "@types/node": "^22.0.0",
            "jest": "^29.0.0",
            "pino-pretty": "^10.0.0",
            "ts-jest": "^29.0.0",
            "typescript": "^5.0.0",
        },
        "keywords": ["integration", "sdk", normalized_name],
        "license": "UNLICENSED",
    }


def build_readme(provider_name: str, normalized_name: str, analysis: AnalysisResult,
                 endpoints: List[Endpoint]) -> str:
    prop = _SERVICE_LAYOUT[analysis.provider_type][2]
    package = f"{SDK_SCOPE}/{normalized_name}-sdk"
    api_reference = "\n".join(f"- **{e.method} {e.path}**: {e.purpose}" for e in endpoints) or "- No endpoints detected"
    issues = "\n".join(f"- {issue}" for issue in analysis.issues)
    recommendations = "\n".join(f"- {rec}" for rec in analysis.recommendations)

    sections = [
        f"# {provider_name} SDK",
        f"Generated SDK for {provider_name} ({analysis.provider_type.value} provider, "
        f"{analysis.confidence}% analysis confidence).",
        f"## Installation\n\n```bash\nnpm install {package}\n```",
        "## Usage\n\n```typescript\n"
        f"import {{ ClientSDK, setAppConfig, authenticate }} from '{package}';\n\n"
        "setAppConfig({ env: 'development', debug: true, baseUrl: 'https://api.provider.com' });\n\n"
        "const token = await authenticate('your-api-key');\n"
        "const sdk = new ClientSDK(token);\n"
        f"// sdk.{prop}.<operation>(...)\n```",
        f"## Authentication\n\nDetected type: `{analysis.authentication.type.value}`",
        f"## API Reference\n\n{api_reference}",
    ]
    if issues:
        sections.append(f"## Issues to Address\n\n{issues}")
    if recommendations:
        sections.append(f"## Recommendations\n\n{recommendations}")
    sections.append("## Development\n\n```bash\nnpm install\nnpm run build\nnpm test\n```")
    return "\n\n".join(sections) + "\n"


@traced("synthesize_sdk")
def synthesize_sdk(analysis: AnalysisResult, provider_name: str) -> GeneratedSDK:
    """Render a TypeScript client package from an analysis result."""
    normalized = normalize_provider_name(provider_name)
    endpoints = _service_endpoints(analysis)

    files = [
        GeneratedFile(path="src/index.ts", content=INDEX_TS, type="typescript"),
        _client_file(analysis),
        GeneratedFile(path="src/config/app-config.ts", content=APP_CONFIG_TS, type="typescript"),
        GeneratedFile(
            path="src/utils/httpService.ts",
            content=HTTP_SERVICE_TS.replace("__AUTH_HEADER__", _http_auth_line(analysis)),
            type="typescript",
        ),
        GeneratedFile(path="src/utils/logger.ts", content=LOGGER_TS, type="typescript"),
        GeneratedFile(path="src/utils/error.ts", content=ERROR_TS, type="typescript"),
        _auth_file(analysis),
        _service_file(analysis),
        *_interfaces_files(analysis),
        _test_file(analysis),
        GeneratedFile(path="jest.config.cjs", content=JEST_CONFIG_CJS, type="javascript"),
        GeneratedFile(path="tsconfig.json", content=json.dumps(TSCONFIG, indent=2) + "\n", type="json"),
    ]

    sdk = GeneratedSDK(
        provider_name=normalized,
        files=files,
        manifest=build_manifest(normalized, provider_name),
        readme=build_readme(provider_name, normalized, analysis, endpoints),
    )

    logger.info("SDK synthesized",
               provider_name=normalized,
               provider_type=analysis.provider_type.value,
               files=len(files),
               endpoints=len(endpoints))
    return sdk

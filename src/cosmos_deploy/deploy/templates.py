"""Fixed text artifacts written by the pipeline.

- ``GITIGNORE_TEMPLATE``: ignore rules, written only when no ignore file exists.
- ``DEPLOYMENT_DOC_TEMPLATE``: ``string.Template`` rendered into
  ``DEPLOYMENT.md`` on every successful run.
- ``DEFAULT_COMMIT_MESSAGE`` and ``NEXT_STEPS``: fixed operator-facing text.
"""

from __future__ import annotations

from datetime import datetime
from string import Template

DEFAULT_COMMIT_MESSAGE = """\
feat: Initial Cosmos Hub deployment with dynamic APIs

- Added comprehensive space weather monitoring with NASA/NOAA APIs
- Implemented real-time satellite tracking with TLE data
- Created sustainability dashboard with environmental metrics
- Set up complete CI/CD pipeline with GitHub Actions
- Added comprehensive testing infrastructure
- Configured Supabase database with Prisma ORM
- Implemented responsive UI with Tailwind CSS
- Added real-time data updates and monitoring"""

NEXT_STEPS = (
    "🔑 Set up environment variables in Vercel",
    "🌐 Deploy frontend to Vercel from GitHub",
    "🔧 Deploy backend to Vercel from GitHub",
    "🗄️ Set up Supabase database",
    "🔗 Update API URLs in configuration",
)

# Matches the output of the POSIX ``date`` command.
DATE_FORMAT = "%a %b %d %H:%M:%S %Z %Y"

GITIGNORE_TEMPLATE = """\
# Dependencies
node_modules/
.pnp
.pnp.js

# Testing
coverage/

# Next.js
.next/
out/

# Production
build/
dist/

# Environment variables
.env
.env.local
.env.development.local
.env.test.local
.env.production.local

# Logs
npm-debug.log*
yarn-debug.log*
yarn-error.log*

# Runtime data
pids
*.pid
*.seed
*.pid.lock

# Optional npm cache directory
.npm

# Optional REPL history
.node_repl_history

# Output of 'npm pack'
*.tgz

# Yarn Integrity file
.yarn-integrity

# dotenv environment variables file
.env

# parcel-bundler cache (https://parceljs.org/)
.cache
.parcel-cache

# Stores VSCode versions used for testing VSCode extensions
.vscode-test

# Temporary folders
tmp/
temp/

# OS generated files
.DS_Store
.DS_Store?
._*
.Spotlight-V100
.Trashes
ehthumbs.db
Thumbs.db

# IDE files
.vscode/
.idea/
*.swp
*.swo

# Prisma
prisma/migrations/
"""

DEPLOYMENT_DOC_TEMPLATE = Template("""\
# 🚀 Cosmos Hub Deployment Information

## 📊 Project Overview
- **Name**: Cosmos Hub (TRASPACE)
- **Description**: Space Weather Monitoring & Sustainability Platform
- **Repository**: ${repository}
- **Live URL**: ${live_url}

## 🏗️ Architecture
- **Frontend**: Next.js 14 + Tailwind CSS (Port 3000)
- **Backend**: Next.js API Routes (Port 3001)
- **Database**: Supabase PostgreSQL + Prisma ORM
- **Deployment**: Vercel (Frontend & Backend)
- **Monitoring**: GitHub Actions CI/CD

## 🔑 Environment Variables Required

### Frontend (.env.local)
```
NEXT_PUBLIC_SUPABASE_URL=your-supabase-url
NEXT_PUBLIC_SUPABASE_ANON_KEY=your-supabase-anon-key
NEXT_PUBLIC_BACKEND_URL=https://your-backend-domain.vercel.app
```

### Backend (.env.local)
```
DATABASE_URL=your-supabase-database-url
DIRECT_URL=your-supabase-direct-url
NASA_API_KEY=your-nasa-api-key
EPA_AIRNOW_API_KEY=your-epa-api-key
N2YO_API_KEY=your-n2yo-api-key
```

## 🚀 Deployment Steps

1. **Database Setup**:
   ```bash
   cd ${database_workspace}
   npx prisma generate
   npx prisma db push
   npx prisma db seed
   ```

2. **Frontend Deployment** (Vercel):
   - Framework: Next.js
   - Root Directory: frontend
   - Build Command: npm run build
   - Output Directory: .next

3. **Backend Deployment** (Vercel):
   - Framework: Next.js
   - Root Directory: backend
   - Build Command: npm run build

## 📱 Features
- 🌦️ Real-time space weather monitoring
- 🛰️ Live satellite tracking with orbital data
- 🌱 Environmental sustainability metrics
- 📊 Interactive data visualizations
- 🔄 Automatic data updates
- 📱 Responsive mobile design
- 🔐 Secure API integrations

## 🌐 API Endpoints
- `/api/weather` - Space weather data
- `/api/satellites` - Satellite tracking
- `/api/sustainability` - Environmental metrics

## 📞 Support
- Repository: ${repository}
- Issues: ${repository}/issues

---
*Deployed on ${deployed_on}*
""")


def repository_web_url(repository_url: str) -> str:
    """Strip a trailing ``.git`` so the URL points at the web UI."""
    return repository_url[:-4] if repository_url.endswith(".git") else repository_url


def format_deploy_date(moment: datetime) -> str:
    return moment.strftime(DATE_FORMAT)


def render_deployment_doc(
    *,
    repository_url: str,
    live_url: str,
    database_workspace: str,
    deployed_at: datetime,
) -> str:
    """Render ``DEPLOYMENT.md`` for a run executed at ``deployed_at``."""
    return DEPLOYMENT_DOC_TEMPLATE.substitute(
        repository=repository_web_url(repository_url),
        live_url=live_url,
        database_workspace=database_workspace,
        deployed_on=format_deploy_date(deployed_at),
    )

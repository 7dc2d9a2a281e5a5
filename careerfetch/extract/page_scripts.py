"""
Scripts evaluated inside the careers page by the browser strategy.

Each constant is a JS function expression passed to ``page.evaluate``. The
return contracts are fixed; bump the matching ``*_VERSION`` when one changes.

- EXPAND_SCRIPT() -> {"found": int, "clicked": int}
- STRUCTURED_SCRIPT(pageUrl) -> list of {id, title, location, department,
  description, apply_url}
- JSONLD_SCRIPT() -> list of {id, title, description, location, department,
  type, posted_date, apply_url}
- TEXT_PATTERN_SCRIPT() -> list of {id, title, description}, at most 20
"""

EXPAND_VERSION = 1
STRUCTURED_VERSION = 1
JSONLD_VERSION = 1
TEXT_PATTERN_VERSION = 1


EXPAND_SCRIPT = """
() => {
  const headers = document.querySelectorAll(
    '[aria-expanded="false"], .accordion-header, .accordion-toggle, ' +
    '.collapsible, .expand-toggle, details:not([open]) > summary'
  );
  let clicked = 0;
  headers.forEach((el) => {
    try {
      el.click();
      clicked += 1;
    } catch (e) {
      // not clickable
    }
  });
  return { found: headers.length, clicked: clicked };
}
"""


STRUCTURED_SCRIPT = """
(pageUrl) => {
  const jobSelectors = [
    '.job-listing', '.job-item', '.career-listing', '.position',
    '.opening', '[data-job]', '.job-card',
  ];
  const titleSelectors = ['h1', 'h2', 'h3', '.title', '.job-title', '.position-title'];
  const locationSelectors = ['.location', '.job-location', '.city', '[data-location]'];
  const departmentSelectors = ['.department', '.category', '.team', '[data-department]'];
  const descriptionSelectors = ['.description', '.summary', '.job-description', 'p'];

  const field = (element, selectors) => {
    for (const selector of selectors) {
      const el = element.querySelector(selector);
      const text = el && el.textContent ? el.textContent.trim() : '';
      if (text) {
        return text;
      }
    }
    return '';
  };

  const applyUrl = (element) => {
    const link = element.querySelector('a[href]');
    if (!link) {
      return '';
    }
    try {
      return new URL(link.getAttribute('href'), pageUrl).href;
    } catch (e) {
      return '';
    }
  };

  const jobs = [];
  const stamp = Date.now();
  for (const selector of jobSelectors) {
    const elements = document.querySelectorAll(selector);
    elements.forEach((element, index) => {
      const title = field(element, titleSelectors);
      if (!title) {
        return;
      }
      jobs.push({
        id: 'scraped-' + title.toLowerCase().replace(/[^a-z0-9]/g, '-') + '-' + stamp + '-' + index,
        title: title,
        location: field(element, locationSelectors),
        department: field(element, departmentSelectors),
        description: field(element, descriptionSelectors),
        apply_url: applyUrl(element),
      });
    });
    if (jobs.length > 0) {
      break;
    }
  }
  return jobs;
}
"""


JSONLD_SCRIPT = """
() => {
  const text = (value) => {
    if (value === null || value === undefined) {
      return '';
    }
    if (Array.isArray(value)) {
      return value.map(text).filter(Boolean).join(', ');
    }
    if (typeof value === 'object') {
      return text(value.name || value.value || '');
    }
    return String(value).trim();
  };

  const location = (data) => {
    let loc = data.jobLocation;
    if (Array.isArray(loc)) {
      loc = loc[0];
    }
    if (loc && typeof loc === 'object') {
      if (loc.address && typeof loc.address === 'object') {
        return text(loc.address.addressLocality);
      }
      return text(loc.address || loc.name);
    }
    return text(loc);
  };

  const convert = (data) => {
    const identifier = data.identifier;
    const org = data.hiringOrganization;
    return {
      id: identifier && typeof identifier === 'object' ? text(identifier.value) : text(identifier || data.id),
      title: text(data.title),
      description: data.description ? String(data.description) : '',
      location: location(data),
      department: org && typeof org === 'object' && org.name ? text(org.name) : text(org || data.department),
      type: text(data.employmentType),
      posted_date: text(data.datePosted),
      apply_url: text(data.url || data.applicationUrl),
    };
  };

  const isPosting = (item) => {
    if (!item || typeof item !== 'object') {
      return false;
    }
    const type = item['@type'];
    return Array.isArray(type) ? type.includes('JobPosting') : type === 'JobPosting';
  };

  const jobs = [];
  const visit = (data) => {
    if (Array.isArray(data)) {
      data.forEach(visit);
      return;
    }
    if (!data || typeof data !== 'object') {
      return;
    }
    if (isPosting(data)) {
      jobs.push(convert(data));
    }
    if (Array.isArray(data['@graph'])) {
      data['@graph'].forEach(visit);
    }
  };

  document.querySelectorAll('script[type="application/ld+json"]').forEach((script) => {
    try {
      visit(JSON.parse(script.textContent || ''));
    } catch (e) {
      // malformed block, skip
    }
  });
  return jobs;
}
"""


TEXT_PATTERN_SCRIPT = """
() => {
  const text = document.body ? document.body.textContent || '' : '';
  const pattern = /(?:engineer|developer|manager|analyst|specialist|coordinator|director|lead|senior|junior)\\s+[a-z\\s]{5,50}/gi;
  const matches = text.match(pattern) || [];
  const stamp = Date.now();
  return matches.slice(0, 20).map((match, index) => ({
    id: 'pattern-' + match.toLowerCase().replace(/[^a-z0-9]/g, '-') + '-' + stamp + '-' + index,
    title: match.trim(),
    description: 'Job details extracted from page content',
  }));
}
"""
